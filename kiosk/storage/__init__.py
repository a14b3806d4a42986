"""Blob storage for visitor attachments."""

from .attachments import AttachmentStorage

__all__ = ["AttachmentStorage"]
