"""Central configuration for head-motion activity recognition."""

import os

from dotenv import load_dotenv

# Load environment variables from a .env file if available.
load_dotenv()

# ------------------------ MODEL / INFERENCE ------------------------
# Window size and sample rate must be the values the network was trained with.
MODEL_PATH = os.getenv("MODEL_PATH", "models/head_classifier.pth")
LABEL_MAP_PATH = os.getenv("LABEL_MAP_PATH", "label_map.json")
WINDOW_SIZE = int(os.getenv("WINDOW_SIZE", "20"))
NUM_FEATURES = 6
SENSOR_UPDATE_INTERVAL = float(os.getenv("SENSOR_UPDATE_INTERVAL", "0.1"))
HIDDEN_SIZE = int(os.getenv("HIDDEN_SIZE", "200"))
# Flattened recurrent state: hidden vector followed by cell vector.
STATE_LENGTH = 2 * HIDDEN_SIZE

# ------------------------ SERVICE ------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "5000"))
