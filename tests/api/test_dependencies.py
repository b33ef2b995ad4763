"""Tests for the multipart product form dependency."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import UploadFile

from storefront.api.dependencies import product_draft_form
from storefront.catalog.assets import AssetStoreGateway
from storefront.domain.exceptions import ValidationError


def mock_upload(filename: str, size: int | None, content: bytes = b"") -> MagicMock:
    upload = MagicMock(spec=UploadFile)
    upload.filename = filename
    upload.size = size
    upload.content_type = "image/jpeg"
    upload.read = AsyncMock(return_value=content)
    return upload


class TestProductDraftForm:
    """Tests for product_draft_form."""

    @pytest.mark.asyncio
    async def test_builds_draft(self, gateway: AssetStoreGateway) -> None:
        """Fields, labels and files end up on the draft."""
        upload = mock_upload("front.jpg", 4, b"data")

        draft = await product_draft_form(
            gateway,
            name="Classic",
            sizes=["M", "M", "L"],
            retained_images=["", "http://x/a.jpg"],
            images=[upload, mock_upload("", 0)],
        )

        assert draft.name == "Classic"
        assert draft.sizes == ["M", "L"]
        assert draft.retained_images == ["http://x/a.jpg"]
        assert [u.filename for u in draft.new_images] == ["front.jpg"]
        assert draft.new_images[0].content == b"data"

    @pytest.mark.asyncio
    async def test_oversize_part_rejected_before_read(self, gateway: AssetStoreGateway) -> None:
        """A part declared larger than the limit is never read."""
        upload = mock_upload("huge.jpg", gateway.max_bytes + 1)

        with pytest.raises(ValidationError) as exc_info:
            await product_draft_form(gateway, images=[upload])

        assert exc_info.value.field == "images"
        upload.read.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_read_is_capped_at_limit(self, gateway: AssetStoreGateway) -> None:
        """Parts of unknown size are read no further than one byte past the limit."""
        content = b"x" * (gateway.max_bytes + 1)
        upload = mock_upload("front.jpg", None, content)

        draft = await product_draft_form(gateway, images=[upload])

        upload.read.assert_awaited_once_with(gateway.max_bytes + 1)
        with pytest.raises(ValidationError):
            gateway.check(draft.new_images[0])
