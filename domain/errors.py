"""
Error taxonomy of the offer extraction pipeline.

Input errors and collaborator errors are recovered per file by the pipeline.
Precondition errors are raised to the caller before a batch starts.
StorageUnavailableError is downgraded to a batch warning.
"""

from __future__ import annotations


class OfferExtractionError(RuntimeError):
    """Base class for every error raised by the extraction pipeline and its collaborators."""
    pass


# Input errors

class FileTooLargeError(OfferExtractionError):
    def __init__(self, file_name: str, size_bytes: int, limit_mb: int):
        self.file_name = file_name
        self.size_bytes = size_bytes
        self.limit_mb = limit_mb
        size_mb = round(size_bytes / 1024 / 1024)
        super().__init__(f"File too large: {file_name} ({size_mb}MB > {limit_mb}MB)")


class UnsupportedFormatError(OfferExtractionError):
    pass


class ReadError(OfferExtractionError):
    pass


# Completion collaborator errors

class CollaboratorUnavailableError(OfferExtractionError):
    pass


class RateLimitedError(CollaboratorUnavailableError):
    pass


class MalformedResponseError(OfferExtractionError):
    pass


# Preconditions

class MissingCredentialError(OfferExtractionError):
    pass


class UnauthenticatedError(OfferExtractionError):
    pass


# Persistence

class StorageUnavailableError(OfferExtractionError):
    pass
