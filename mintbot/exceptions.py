"""
Custom Exception Classes

This module defines custom exceptions for the mintbot application.
Each exception maps to one kind of failure along the collect-and-mint path
so callers can tell failures apart while still degrading quietly.
"""

from typing import List, Optional


class MintbotBaseException(Exception):
    """Base exception for the mintbot application."""

    pass


class CacheAccessError(MintbotBaseException):
    """Raised when the record store cannot be read or written."""

    def __init__(self, key: str, original_error: Exception, message: Optional[str] = None):
        self.key = key
        self.original_error = original_error
        details = f"Record store access failed for key '{key}': {original_error}"
        if message:
            super().__init__(f"{message} - Details: {details}")
        else:
            super().__init__(details)


class IncompleteRecordError(MintbotBaseException):
    """Raised when minting is attempted for a record with unset fields."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Record is missing {', '.join(missing)}")


class ExtractionError(MintbotBaseException):
    """Raised when the model call behind field extraction fails."""

    pass


class MetadataUploadError(MintbotBaseException):
    """Raised when NFT metadata cannot be uploaded to IPFS."""

    pass


class NameResolutionError(MintbotBaseException):
    """Raised when a recipient name cannot be resolved to an address."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"Could not resolve '{name}' to an address")


class ChainSubmissionError(MintbotBaseException):
    """Raised when the mint transaction cannot be built, signed or sent."""

    pass


class ConfigurationError(MintbotBaseException):
    """Raised for configuration problems."""

    pass
