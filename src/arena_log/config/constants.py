"""
Fixed locations and names used by the MTGA log decoder.
"""

from pathlib import Path

# Default MTGA log location under the user's home directory (Windows client)
DEFAULT_MTGA_LOG_RELATIVE = ("AppData", "LocalLow", "Wizards Of The Coast", "MTGA")

DEFAULT_LOG_FILENAMES = ("Player.log", "output_log.txt")

# Steam install keeps timestamped logs here
STEAM_MTGA_LOGS_DIR = Path("C:/Program Files (x86)/Steam/steamapps/common/MTGA/MTGA_Data/Logs/Logs")

# Other places the client has been seen writing its log
ALTERNATIVE_LOG_DIRS_RELATIVE = (
    ("AppData", "Local", "Wizards Of The Coast", "MTGA"),
    ("AppData", "Roaming", "Wizards Of The Coast", "MTGA"),
    ("Documents", "MTGA"),
    ("Documents", "Wizards Of The Coast", "MTGA"),
    # macOS client
    ("Library", "Logs", "Wizards Of The Coast", "MTGA"),
    # Linux, Steam through Proton
    (".steam", "steam", "steamapps", "compatdata", "2141910", "pfx", "drive_c", "users", "steamuser",
     "AppData", "LocalLow", "Wizards Of The Coast", "MTGA"),
)

# Environment variables (may be set in a .env file)
ENV_LOG_PATH = "MTGA_LOG_PATH"
ENV_LOG_LEVEL = "MTGA_DECODER_LOG_LEVEL"
ENV_MAX_PENDING_RPCS = "MTGA_DECODER_MAX_PENDING_RPCS"

CONFIG_DIR_NAME = ".mtga_log_decoder"
PREFS_FILENAME = "preferences.json"

DECODER_LOG_FILENAME = "decoder.log"
