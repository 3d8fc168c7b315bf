"""Shared constants for the field agent."""

from pathlib import Path

# Project root = fleet-agent/
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# ── Coordinator ──────────────────────────────────────────────────────────────
DEFAULT_PORT = 48228
API_PREFIX = "/turtle"
PROGRAM_NAME = "client.py"      # served by FETCH_PROGRAM
HTTP_TIMEOUT = 15               # seconds per round trip

# ── Local state (one directory per agent) ────────────────────────────────────
DEFAULT_STATE_DIR = Path.home() / ".fleet-agent"
ID_FILE = "id"
LABEL_FILE = "label"
ENTRY_POINT_FILE = "startup.py"
BACKUP_FILE = "startup-backup.py"
JOURNAL_FILE = "journal.jsonl"

# Boot media (equivalent of a floppy in the agent's drive)
DEFAULT_DISK_DIR = Path("/disk")
DISK_IP_FILE = "ip"
DISK_POS_FILE = "pos"

# ── Control loop ─────────────────────────────────────────────────────────────
SHUTDOWN_COMMAND = "Poweroff"
UPDATE_COMMAND = "Update"
REGISTER_RETRY_DELAY = 1.0      # fixed, no backoff before an identity exists

# Recursion guard for self-update: argv marker + environment flag
UPDATE_GUARD_ARG = "nested"
UPDATE_GUARD_ENV = "AGENT_UPDATE_GUARD"

# ── Sensors / inventory ──────────────────────────────────────────────────────
EMPTY_BLOCK = "minecraft:air"
INVENTORY_SLOTS = 16
FUEL_SLOT = 16
DIRECTIONS = ("North", "South", "East", "West")
