"""
Audio module - capture lifecycle and transport encoding.
"""

from .capture import (
    PREFERRED_MIME_TYPES,
    AudioSource,
    CaptureAdapter,
    CaptureHandle,
    DeviceStream,
    RecordingSession,
    select_mime_type,
)
from .encoder import (
    Base64Encoder,
    Base64Payload,
    MultipartEncoder,
    MultipartPayload,
    TransportPayload,
    create_encoder,
    decode,
    decode_base64,
)

__all__ = [
    "PREFERRED_MIME_TYPES",
    "AudioSource",
    "Base64Encoder",
    "Base64Payload",
    "CaptureAdapter",
    "CaptureHandle",
    "DeviceStream",
    "MultipartEncoder",
    "MultipartPayload",
    "RecordingSession",
    "TransportPayload",
    "create_encoder",
    "decode",
    "decode_base64",
    "select_mime_type",
]
