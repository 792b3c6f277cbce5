import pytest

from localgov.services.filenames import NameRegistry, sanitize_filename, uniquify_filename


class TestSanitizeFilename:
    def test_keeps_safe_name(self) -> None:
        assert sanitize_filename("pothole.jpg") == "pothole.jpg"

    def test_strips_posix_directories(self) -> None:
        assert sanitize_filename("../../etc/passwd") == "passwd"

    def test_strips_windows_directories(self) -> None:
        assert sanitize_filename("C:\\Users\\me\\Pictures\\photo.jpg") == "photo.jpg"

    def test_replaces_invalid_characters(self) -> None:
        assert sanitize_filename('bad<name>:"x"|?*.png') == "bad_name___x____.png"

    def test_replaces_control_characters(self) -> None:
        assert sanitize_filename("tab\there\x00.png") == "tab_here_.png"

    def test_trims_surrounding_whitespace(self) -> None:
        assert sanitize_filename("   street light.png  ") == "street light.png"

    @pytest.mark.parametrize("raw", [None, "", "   ", "folder/", ".", "..", "a/.."])
    def test_returns_empty_for_unusable_names(self, raw) -> None:
        assert sanitize_filename(raw) == ""

    def test_clamps_to_255_keeping_extension(self) -> None:
        result = sanitize_filename("a" * 300 + ".jpeg")

        assert len(result) == 255
        assert result.endswith(".jpeg")
        assert result == "a" * 250 + ".jpeg"

    def test_long_extension_kept_whole(self) -> None:
        ext = "." + "x" * 260
        result = sanitize_filename("name" + ext)

        assert result == "n" + ext

    def test_clamps_multibyte_names_by_encoded_length(self) -> None:
        result = sanitize_filename("\u00e9" * 200 + ".jpg")

        assert len(result.encode("utf-8")) <= 255
        assert result == "\u00e9" * 125 + ".jpg"

    def test_clamp_never_splits_a_character(self) -> None:
        result = sanitize_filename("a" + "\u20ac" * 100 + ".png")

        assert len(result.encode("utf-8")) <= 255
        assert result.endswith(".png")
        assert "\ufffd" not in result

    def test_replaces_lone_surrogates(self) -> None:
        assert sanitize_filename("bad\udcffname.png") == "bad_name.png"

    @pytest.mark.parametrize(
        "raw",
        [
            "photo.jpg",
            "C:\\fakepath\\photo.jpg",
            "  spaced  name  ",
            'we?ird*na|me.tar.gz',
            "x" * 400,
            "b" * 300 + ".png",
            "dots...",
            ".hidden",
            "ünïcödé 📷.heic",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        once = sanitize_filename(raw)

        assert sanitize_filename(once) == once


class TestUniquifyFilename:
    def test_unused_name_unchanged(self) -> None:
        assert uniquify_filename(set(), "a.png") == "a.png"

    def test_first_collision_gets_one(self) -> None:
        assert uniquify_filename({"a.png"}, "a.png") == "a (1).png"

    def test_escalates_suffix(self) -> None:
        assert uniquify_filename({"a.png", "a (1).png"}, "a.png") == "a (2).png"

    def test_fills_first_gap(self) -> None:
        assert uniquify_filename({"a.png", "a (2).png"}, "a.png") == "a (1).png"

    def test_name_without_extension(self) -> None:
        assert uniquify_filename({"README"}, "README") == "README (1)"

    def test_numbering_independent_per_base(self) -> None:
        used = {"a.png", "a (1).png", "b.png"}

        assert uniquify_filename(used, "b.png") == "b (1).png"

    def test_deterministic_and_pure(self) -> None:
        used = {"a.png"}

        first = uniquify_filename(used, "a.png")
        second = uniquify_filename(used, "a.png")

        assert first == second == "a (1).png"
        assert used == {"a.png"}

    def test_suffix_fits_at_length_limit(self) -> None:
        name = "a" * 251 + ".jpg"

        result = uniquify_filename({name}, name)

        assert len(result) == 255
        assert result == "a" * 247 + " (1).jpg"

    def test_base_shrinks_as_suffix_grows(self) -> None:
        name = "a" * 251 + ".jpg"
        used = {name} | {"a" * 247 + f" ({n}).jpg" for n in range(1, 10)}

        result = uniquify_filename(used, name)

        assert result == "a" * 246 + " (10).jpg"
        assert len(result) == 255


class TestNameRegistry:
    def test_contains_is_case_insensitive(self) -> None:
        registry = NameRegistry(["Photo.JPG"])

        assert "photo.jpg" in registry
        assert "other.jpg" not in registry

    def test_claim_reserves_name(self) -> None:
        registry = NameRegistry()

        assert registry.claim("a.png") == "a.png"
        assert registry.claim("a.png") == "a (1).png"
        assert registry.claim("A.PNG") == "A (2).PNG"
        assert len(registry) == 3

    def test_seeded_names_are_respected(self) -> None:
        registry = NameRegistry(["a.png", "a (1).png"])

        assert registry.claim("a.png") == "a (2).png"
