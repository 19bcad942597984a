"""
Configuration constants for keyguard.
"""

# Application Metadata
APP_VERSION = "1.0"  # Use: Current version of the library. Type: str. Range: Semantic versioning string (e.g., "1.0.0")
APP_NAME = "keyguard"  # Use: Name used in log records and the command line. Type: str. Range: Any valid string.

# Security Settings
# Changing any of these makes previously stored blobs undecryptable: the blob
# format carries no version tag for its derivation parameters.
SALT_SIZE = 16  # Use: Size of the random PBKDF2 salt in bytes, stored at the start of every blob. Type: int. Range: 16 bytes (128 bits).
NONCE_SIZE = 12  # Use: Size of the AES-GCM nonce (IV) in bytes, stored after the salt. Type: int. Range: 12 bytes (96 bits) is the recommended size for GCM.
TAG_SIZE = 16  # Use: Size of the AES-GCM authentication tag in bytes, appended to the ciphertext. Type: int. Range: 16 bytes (128 bits).
KEY_SIZE = 32  # Use: Size of the derived encryption key in bytes. Corresponds to AES-256. Type: int. Range: 32 bytes.
PBKDF2_ITERATIONS = 100000  # Use: Number of iterations for PBKDF2-HMAC-SHA256 key derivation from the device fingerprint. Type: int. Range: At least 100,000.
FINGERPRINT_LENGTH = 32  # Use: Number of base64 characters of the SHA-256 digest of the environment string kept as the device fingerprint. Type: int. Range: 1 to 44.

# Session Settings
SESSION_TIMEOUT_SECONDS = 30 * 60  # Use: Inactivity in seconds after which the timeout callback fires. Type: int. Range: Positive integer.
SESSION_WARNING_SECONDS = 25 * 60  # Use: Inactivity in seconds after which the warning callback fires (5 minutes before timeout). Type: int. Range: 0 < value < SESSION_TIMEOUT_SECONDS.
SESSION_POLL_INTERVAL_SECONDS = 60  # Use: Interval in seconds between inactivity checks. Type: int. Range: Positive integer, well below SESSION_WARNING_SECONDS.

# Lockout Settings
MAX_LOGIN_ATTEMPTS = 5  # Use: Failed attempts within the lockout window that lock an identifier out. Type: int. Range: Positive integer (e.g., 3-10).
LOCKOUT_WINDOW_SECONDS = 15 * 60  # Use: Trailing window in seconds over which failed attempts are counted. Type: int. Range: Positive integer.

# API Key Settings
API_KEY_PROVIDERS = ("openai", "claude", "google")  # Use: Providers whose API keys can be stored. Type: tuple[str]. Range: Non-empty tuple of lowercase names.
API_KEY_SUFFIX = "_api_key"  # Use: Suffix of the storage entry holding a provider's encrypted key. Type: str. Range: Any string.
API_KEY_CREATED_SUFFIX = "_created"  # Use: Suffix of the plaintext storage entry holding when a key was stored. Type: str. Range: Any string.
API_KEY_ROTATION_DAYS = 90  # Use: Age in days after which rotating an API key is recommended. Type: int. Range: Positive integer.

# Audit Settings
SECURITY_EVENTS_KEY = "security_events"  # Use: Storage entry holding the JSON list of recent security events. Type: str. Range: Any string.
SECURITY_EVENTS_MAX = 100  # Use: Maximum number of security events kept in storage; older ones are dropped first. Type: int. Range: Positive integer.
SECURITY_SEVERITIES = ("info", "warning", "error")  # Use: Allowed severities for security events. Type: tuple[str]. Range: Subset of logging level names.

# File and Directory Names
CONFIG_DIR_NAME = ".keyguard"  # Use: Name of the hidden directory within the user's home directory where keyguard stores its data. Type: str. Range: Any valid directory name.
STORE_FILE = "storage.json"  # Use: Filename of the local key-value store. Type: str. Range: Any valid filename.

# Logging
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'  # Use: Format passed to logging.basicConfig by the command line. Type: str. Range: Valid logging format string.
