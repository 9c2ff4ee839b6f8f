"""Tests for the inventory service operations."""
from unittest.mock import patch

import pytest

from inventory_service.attachments import Upload
from inventory_service.errors import (
    BadRequestError,
    NotFoundError,
    PhotoMissingError,
    ValidationError,
)
from inventory_service.repository import Item
from inventory_service.service import field_text, is_flag_set, photo_url


def jpeg(content=b"\xff\xd8photo", filename="photo.jpg"):
    return Upload(content=content, filename=filename)


class TestRegister:

    def test_register_without_photo(self, service):
        """Register an item with no photo and read it back."""
        item = service.register(name="Drill", description="", upload=None)

        assert isinstance(item.id, str)
        assert service.get_by_id(item.id) == Item(id=item.id, name="Drill", description="", photo_ref=None)

    def test_register_with_photo(self, service):
        """Register an item with a photo and get the same bytes back."""
        item = service.register("Drill", "Cordless", jpeg(b"original bytes"))

        assert service.get_photo(item.id) == b"original bytes"

    def test_ids_are_pairwise_distinct(self, service):
        ids = [service.register(f"item {i}").id for i in range(50)]

        assert len(set(ids)) == 50

    def test_name_required(self, service, blobs):
        """Test that a rejected registration leaves no blob behind."""
        with pytest.raises(ValidationError):
            service.register("", "desc", jpeg())

        assert blobs.names() == []
        assert service.list() == []

    def test_failed_create_discards_blob(self, service, blobs):
        with patch.object(service.repository, "create", side_effect=ValidationError("nope")):
            with pytest.raises(ValidationError):
                service.register("Drill", "", jpeg())

        assert blobs.names() == []


class TestListAndGet:

    def test_list(self, service):
        first = service.register("Drill")
        second = service.register("Saw")

        assert [item.id for item in service.list()] == [first.id, second.id]

    def test_get_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.get_by_id("absent")


class TestUpdateMetadata:

    def test_empty_description_changes_nothing(self, service):
        item = service.register("Drill", "Cordless")

        updated = service.update_metadata(item.id, {"description": ""})

        assert (updated.name, updated.description) == ("Drill", "Cordless")

    def test_updates_name_and_ignores_unknown_fields(self, service):
        item = service.register("Drill", "Cordless", jpeg())

        updated = service.update_metadata(item.id, {"name": "Hammer drill", "photo_ref": None, "id": "x"})

        assert updated.name == "Hammer drill"
        assert updated.id == item.id
        assert updated.photo_ref == item.photo_ref

    def test_unknown_id(self, service):
        with pytest.raises(NotFoundError):
            service.update_metadata("absent-id", {"name": "x"})


class TestPhotos:

    def test_get_photo_without_reference(self, service):
        item = service.register("Drill")

        with pytest.raises(NotFoundError) as exc_info:
            service.get_photo(item.id)

        assert not isinstance(exc_info.value, PhotoMissingError)

    def test_get_photo_with_missing_blob(self, service, blobs):
        """Test that a reference to a vanished file is reported as a missing photo."""
        item = service.register("Drill", "", jpeg())
        (blobs.root / item.photo_ref).unlink()

        with pytest.raises(PhotoMissingError) as exc_info:
            service.get_photo(item.id)

        assert exc_info.value.status_code == 404
        assert exc_info.value.blob_name == item.photo_ref

    def test_replace_twice(self, service, blobs):
        """Test that only the last uploaded photo survives two replacements."""
        item = service.register("Drill", "", jpeg(b"original"))
        original_ref = item.photo_ref

        service.replace_photo(item.id, jpeg(b"first"))
        first_ref = service.get_by_id(item.id).photo_ref
        service.replace_photo(item.id, jpeg(b"second"))

        assert service.get_photo(item.id) == b"second"
        assert not blobs.exists(first_ref)
        assert not blobs.exists(original_ref)
        assert blobs.names() == [service.get_by_id(item.id).photo_ref]

    def test_replace_without_file(self, service):
        item = service.register("Drill")

        with pytest.raises(BadRequestError):
            service.replace_photo(item.id, None)

    def test_replace_unknown_item(self, service):
        with pytest.raises(NotFoundError):
            service.replace_photo("absent", jpeg())


class TestDelete:

    def test_delete_removes_item_and_photo(self, service, blobs):
        item = service.register("Drill", "", jpeg())

        service.delete(item.id)

        with pytest.raises(NotFoundError):
            service.get_by_id(item.id)
        with pytest.raises(NotFoundError):
            service.get_photo(item.id)
        assert blobs.names() == []

    def test_delete_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.delete("absent")


class TestSearch:

    def test_unknown_id(self, service):
        with pytest.raises(NotFoundError):
            service.search("absent")

    def test_missing_id(self, service):
        with pytest.raises(NotFoundError):
            service.search("")

    def test_without_photo_flag(self, service):
        item = service.register("Drill", "Cordless", jpeg())

        result = service.search(item.id)

        assert result.item.id == item.id
        assert result.description == "Cordless"
        assert result.photo_url is None

    @pytest.mark.parametrize("flag", ["on", True, "true"])
    def test_annotates_description_with_photo_pointer(self, service, flag):
        item = service.register("Drill", "Cordless", jpeg())

        result = service.search(item.id, include_photo=flag)

        assert result.description == f"Cordless\nPhoto: /inventory/{item.id}/photo"
        assert result.photo_url == photo_url(item.id)

    def test_annotation_with_empty_description(self, service):
        item = service.register("Drill", "", jpeg())

        result = service.search(item.id, include_photo=True)

        assert result.description == f"Photo: /inventory/{item.id}/photo"

    def test_flag_without_photo(self, service):
        item = service.register("Drill", "Cordless")

        result = service.search(item.id, include_photo="on")

        assert result.description == "Cordless"
        assert result.photo_url is None

    def test_search_does_not_change_stored_description(self, service):
        """Test that repeated searches leave the stored record untouched."""
        item = service.register("Drill", "Cordless", jpeg())

        for _ in range(3):
            service.search(item.id, include_photo="on")

        assert service.get_by_id(item.id).description == "Cordless"


class TestHelpers:

    @pytest.mark.parametrize("value,expected", [
        ("on", True),
        ("true", True),
        (True, True),
        ("off", False),
        ("yes", False),
        ("True", False),
        (False, False),
        (None, False),
        (1, False),
    ])
    def test_is_flag_set(self, value, expected):
        assert is_flag_set(value) is expected

    @pytest.mark.parametrize("value,expected", [
        ("Drill", "Drill"),
        ("", ""),
        (42, "42"),
        (None, None),
        (True, None),
        (b"bytes", None),
        (["list"], None),
    ])
    def test_field_text(self, value, expected):
        assert field_text(value) == expected
