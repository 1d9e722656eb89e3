import pytest

from src.platform.logging.loguru_io_config import MASK
from src.platform.logging.loguru_io_utils import (
    MAX_CONTENT_LENGTH,
    mask_sensitive,
    normalize_args_kwargs,
    should_mask_keyword,
    truncate_content,
)


pytestmark = pytest.mark.unit


class TestMasking:
    @pytest.mark.parametrize('keyword', ['password', 'signature', 'razorpay_signature', 'token'])
    def test_sensitive_keywords_are_masked(self, keyword):
        assert should_mask_keyword(keyword, 'abc') == MASK

    def test_other_keywords_pass_through(self):
        assert should_mask_keyword('quantity', 3) == 3

    def test_pairs_inside_strings_are_masked(self):
        masked = mask_sensitive("{'provider_signature': 'deadbeef', 'quantity': 2}")

        assert 'deadbeef' not in masked
        assert MASK in masked
        assert "'quantity': 2" in masked

    def test_non_string_values_are_untouched(self):
        assert mask_sensitive(42) == 42


class TestTruncate:
    def test_long_content_is_cut(self):
        result = truncate_content('x' * (MAX_CONTENT_LENGTH + 50))

        assert result.startswith('x' * MAX_CONTENT_LENGTH)
        assert result.endswith(f'({MAX_CONTENT_LENGTH + 50} chars)')

    def test_short_content_is_kept(self):
        assert truncate_content('short') == 'short'


class TestNormalizeArgsKwargs:
    def test_unknown_kwargs_are_dropped(self):
        def handler(event_id: int, *, quantity: int) -> None:
            pass

        args, kwargs = normalize_args_kwargs(handler, 1, quantity=2, request=object())

        assert args == (1,)
        assert kwargs == {'quantity': 2}
