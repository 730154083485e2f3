# Copyright (c) 2025 Trae AI. All rights reserved.

from typing import List, Dict


class StudioSiteError(Exception):
    """Base class for errors raised by the studio site backend."""


class ConfigError(StudioSiteError):
    pass


class InvalidPathError(StudioSiteError):
    """
    A category or file path that would resolve outside the media root.
    """

    def __init__(self, path: str, reason: str = "path escapes media root"):
        super().__init__(f"Invalid path '{path}': {reason}")
        self.path = path
        self.reason = reason


class ScanError(StudioSiteError):
    """
    An unexpected filesystem error while walking the media root.
    """

    def __init__(self, path, cause: Exception):
        super().__init__(f"Scan failed at {path}: {cause}")
        self.path = path
        self.cause = cause


class ContactValidationError(StudioSiteError):
    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__(f"Contact form validation failed ({len(errors)} errors)")
        self.errors = errors


class DeliveryError(StudioSiteError):
    pass
