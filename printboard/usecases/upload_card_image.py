"""Use case for attaching part or application photos to a card."""

from __future__ import annotations

from dataclasses import dataclass

from printboard.domain.errors import ValidationError
from printboard.domain.ports import ImageKind
from printboard.usecases.sync_cards import Authenticate

_IMAGE_KINDS = ("part", "application")


@dataclass
class UploadCardImage:
    """Upload image bytes and return the URL to store on the card."""

    authenticate: Authenticate

    def __call__(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        kind: ImageKind = "part",
    ) -> str:
        if kind not in _IMAGE_KINDS:
            raise ValidationError(["kind"], f"Unknown image kind '{kind}'")
        if not data:
            raise ValidationError(["image"], "Image is empty")
        if content_type and not content_type.lower().startswith("image/"):
            raise ValidationError(["content_type"], f"Not an image: {content_type}")
        self.authenticate()
        return self.authenticate.store.upload_image(data, filename, content_type, kind)


__all__ = ["UploadCardImage"]
