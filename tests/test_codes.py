import uuid

import pytest

from qr_inventory.codes import CodeResolver, generate_code
from qr_inventory.errors import CodeResolutionExhaustedError


def sequence(*codes):
    """Generator stub returning the given codes in order."""
    it = iter(codes)
    return lambda: next(it)


class TestGenerateCode:
    def test_is_uuid_text(self):
        code = generate_code()
        assert str(uuid.UUID(code)) == code

    def test_codes_differ(self):
        assert len({generate_code() for _ in range(100)}) == 100


class TestCodeResolver:
    def test_missing_code_is_generated(self):
        resolver = CodeResolver(exists=lambda c: False, generate=sequence("gen-1"))
        assert resolver.resolve(None) == "gen-1"

    @pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
    def test_blank_code_is_generated(self, blank):
        resolver = CodeResolver(exists=lambda c: False, generate=sequence("gen-1"))
        assert resolver.resolve(blank) == "gen-1"

    def test_free_requested_code_is_kept(self):
        resolver = CodeResolver(exists=lambda c: False, generate=sequence())
        assert resolver.resolve("A1") == "A1"

    def test_requested_code_is_trimmed(self):
        checked = []
        resolver = CodeResolver(exists=lambda c: checked.append(c) or False)
        assert resolver.resolve("  A1 ") == "A1"
        assert checked == ["A1"]

    def test_taken_code_falls_back_to_generation(self):
        taken = {"A1"}
        resolver = CodeResolver(exists=taken.__contains__, generate=sequence("gen-1"))
        assert resolver.resolve("A1") == "gen-1"

    def test_generated_collisions_are_retried(self):
        taken = {"dup-1", "dup-2"}
        resolver = CodeResolver(exists=taken.__contains__, generate=sequence("dup-1", "dup-2", "free"))
        assert resolver.resolve("") == "free"

    def test_gives_up_after_max_attempts(self):
        calls = []

        def generate():
            calls.append(1)
            return "always-taken"

        resolver = CodeResolver(exists=lambda c: True, generate=generate, max_attempts=4)
        with pytest.raises(CodeResolutionExhaustedError) as exc_info:
            resolver.resolve("A1")
        assert len(calls) == 4
        assert exc_info.value.attempts == 4
        assert exc_info.value.status_code == 500

    def test_rejects_non_positive_max_attempts(self):
        with pytest.raises(ValueError):
            CodeResolver(exists=lambda c: False, max_attempts=0)
