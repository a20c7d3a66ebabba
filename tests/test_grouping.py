import pytest

from sprite_packer.errors import InvalidReference
from sprite_packer.grouping import GroupKeyResolver, sheet_filename


@pytest.mark.parametrize(
    "source, key",
    [
        ("sprites/30x30.png", "sprites"),
        ("other_images/test.png", "other_images"),
        ("other_images/more-images/sprites/test.png", "other_images/more-images/sprites"),
        ("./sprites//a.png", "sprites"),
        ("icons\\small\\a.png", "icons/small"),
    ],
)
def test_parent_folder_is_the_key(source, key) -> None:
    assert GroupKeyResolver()(source) == key


@pytest.mark.parametrize("source", ["test.png", "./test.png", "/test.png", ""])
def test_reference_without_folder_is_invalid(source) -> None:
    with pytest.raises(InvalidReference):
        GroupKeyResolver()(source)


def test_strip_folder_drops_trailing_match() -> None:
    resolver = GroupKeyResolver(strip_folder="sprites")
    assert resolver("a/b/sprites/x.png") == "a/b"
    assert resolver("a/b/icons/x.png") == "a/b/icons"


def test_strip_folder_keeps_lone_folder() -> None:
    assert GroupKeyResolver(strip_folder="sprites")("sprites/x.png") == "sprites"


def test_sheet_filename() -> None:
    assert sheet_filename("other_images/more-images/sprites") == (
        "other_images/more-images/sprites.png"
    )
