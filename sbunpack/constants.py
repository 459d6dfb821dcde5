import re
import time


# Project type tags
TYPE_SB = "sb"
TYPE_SB2 = "sb2"
TYPE_SB3 = "sb3"
PROJECT_TYPES = (TYPE_SB, TYPE_SB2, TYPE_SB3)

PROJECT_JSON = "project.json"
# Inner project names, in lookup priority order
PROJECT_BINARY_NAMES = ("project.zip", "project")

# Asset naming conventions; the only sb2/sb3 signal when project.json is not parsed
SB3_ASSET_RE = re.compile(r"^[a-f0-9]{32}\.[a-z0-9]{3}$", re.IGNORECASE)
SB2_ASSET_RE = re.compile(r"^[0-9]+\.[a-z0-9]{3}$", re.IGNORECASE)

# Keys of project.json that identify the format
SB3_JSON_KEY = "targets"
SB2_JSON_KEY = "objName"

# Every rebuilt zip entry carries this timestamp (2022-09-11T04:18:07Z).
FIXED_ZIP_TIMESTAMP_MS = 1662869887000
FIXED_ZIP_DATE_TIME = tuple(time.gmtime(FIXED_ZIP_TIMESTAMP_MS // 1000)[:6])
ZIP_CREATE_SYSTEM = 0  # MS-DOS
ZIP_FILE_ATTR = 0

# Base85
BASE85_RADIX = 85
BASE85_GROUP_CHARS = 5
BASE85_GROUP_BYTES = 4
BASE85_HEADER_SEP = ","
# v1: 0x29 - 0x7d with 0x5c (\) replaced by 0x7e (~)
BASE85_V1_OFFSET = 0x29
BASE85_V1_ESCAPE = 0x7E
BASE85_V1_ESCAPED = 0x5C
# v2+: 0x2a - 0x7e with 0x3c (<) and 0x3e (>) replaced by 0x28 and 0x29
BASE85_V2_OFFSET = 0x2A
BASE85_V2_SUBSTITUTIONS = {0x28: 0x3C, 0x29: 0x3E}
# v3 length header: each char is the digit shifted up by ord("1")
BASE85_V3_HEADER_SHIFT = 49

DATA_URI_BASE64_MARKER = ";base64,"

# Extension written by the CLI for each type
EXTENSIONS = {TYPE_SB: ".sb", TYPE_SB2: ".sb2", TYPE_SB3: ".sb3"}

# Scratch 1 (.sb) files start with "ScratchV01" or "ScratchV02"
SB1_MAGIC = b"ScratchV0"
