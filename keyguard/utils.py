import platform
import os
import stat
import logging

from . import config

logger = logging.getLogger(__name__)

if platform.system() == "Windows":
    try:
        import win32security
        import win32api
        import win32con
        import win32file
        WINDOWS_SECURITY_AVAILABLE = True
    except ImportError:
        logger.warning("pywin32 not fully installed, cannot set Windows file permissions securely.")
        WINDOWS_SECURITY_AVAILABLE = False
else:
    WINDOWS_SECURITY_AVAILABLE = False


def get_config_dir() -> str:
    """Return the keyguard data directory, creating it if needed."""
    path = os.path.join(os.path.expanduser("~"), config.CONFIG_DIR_NAME)
    os.makedirs(path, exist_ok=True)
    return path


def set_owner_only_permissions(filepath: str) -> bool:
    """
    Restrict a file to its owner.

    Returns:
        True if the permissions were applied
    """
    if platform.system() == 'Windows':
        return _set_windows_file_permissions(filepath)
    os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR)  # 600
    return True


def _set_windows_file_permissions(filepath: str) -> bool:
    """
    Grant full control of a file to the current user only, removing
    inherited access for everyone else.
    """
    if not WINDOWS_SECURITY_AVAILABLE:
        logger.warning(f"Skipping Windows file permission setting for {filepath}: pywin32 not available.")
        return False

    try:
        current_user_name = win32api.GetUserName()
        current_user_sid, _, _ = win32security.LookupAccountName(None, current_user_name)

        dacl = win32security.ACL()
        dacl.AddAccessAllowedAce(
            win32security.ACL_REVISION,
            win32con.GENERIC_READ | win32con.GENERIC_WRITE,
            current_user_sid
        )

        file_handle = win32file.CreateFile(
            filepath,
            win32con.WRITE_DAC,
            win32file.FILE_SHARE_READ | win32file.FILE_SHARE_WRITE | win32file.FILE_SHARE_DELETE,
            None,
            win32con.OPEN_EXISTING,
            win32con.FILE_ATTRIBUTE_NORMAL,
            None
        )

        try:
            win32security.SetSecurityInfo(
                file_handle,
                win32security.SE_FILE_OBJECT,
                win32security.DACL_SECURITY_INFORMATION | win32security.PROTECTED_DACL_SECURITY_INFORMATION,
                None,
                None,
                dacl,
                None
            )
            logger.info(f"Set restrictive permissions for {filepath} on Windows.")
        finally:
            win32file.CloseHandle(file_handle)
    except Exception as e:
        if isinstance(e, win32api.error) and e.winerror == 5:  # Access is denied
            logger.warning(f"Could not harden Windows permissions for {filepath}: Access is denied.")
            return True
        logger.error(f"Failed to set Windows file permissions for {filepath}: {e}")
        return False
    return True
