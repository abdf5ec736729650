import os
from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Durable key-value slot directory (overridable for deployments)
STORE_DIR = Path(
    os.environ.get("CELEBRITY_DRAFT_STORE_DIR", PROJECT_ROOT / "data" / "store")
)

# Store keys
DRAFT_STATE_KEY = "draft-state"
CHECKPOINTS_KEY = "checkpoints"
CUSTOM_LISTS_KEY = "custom-lists"
VALIDATION_KEY_PREFIX = "validation/"

# Notification channel shared by every connected viewer
CHANNEL_NAME = "celebrity-draft-room"
STATE_UPDATED_MESSAGE = "state:updated"

# Round limits
MIN_ROUNDS = 1
MAX_ROUNDS = 200
DEFAULT_ROUNDS = 3

# Retention
MAX_CHECKPOINTS = 10
MAX_CHECKPOINT_NAME_LENGTH = 120
MAX_HISTORY_SNAPSHOTS = 10

# Fixed roster for the room, in draft order
PRECONFIGURED_DRAFTERS = [
    {"id": "drafter-josh", "name": "Josh", "order": 1},
    {"id": "drafter-jim", "name": "Jim", "order": 2},
    {"id": "drafter-kyle", "name": "Kyle", "order": 3},
    {"id": "drafter-pj", "name": "Pj", "order": 4},
    {"id": "drafter-zaccheo", "name": "Zaccheo", "order": 5},
    {"id": "drafter-cory", "name": "Cory", "order": 6},
    {"id": "drafter-pat", "name": "Pat", "order": 7},
]

DEFAULT_CELEBRITIES = [
    "Taylor Swift",
    "LeBron James",
    "Beyoncé",
    "Lionel Messi",
    "Rihanna",
    "Tom Cruise",
    "Zendaya",
    "Billie Eilish",
    "The Rock",
    "Lady Gaga",
    "Ariana Grande",
    "Harry Styles",
    "Selena Gomez",
    "Drake",
    "Bruno Mars",
    "Scarlett Johansson",
    "Chris Hemsworth",
    "Keanu Reeves",
    "Jennifer Lawrence",
    "Dua Lipa",
]
