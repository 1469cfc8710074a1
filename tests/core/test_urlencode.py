"""
Unit tests for path segment percent-encoding.
"""

import pytest

from relinstall.core.urlencode import decode_path_segment, encode_path_segment

MUST_ENCODE = " \t!\"#$&'()*+,-./:;<=>?@[\\]^_`{|}~"


class TestEncodePathSegment:
    """Test encode_path_segment function."""

    def test_alphanumerics_unchanged(self):
        """Test letters and digits pass through."""
        assert encode_path_segment("abcXYZ0189") == "abcXYZ0189"

    def test_slash_encoded(self):
        """Test project path separator is encoded."""
        assert encode_path_segment("acme/relctl") == "acme%2Frelctl"

    @pytest.mark.parametrize("char", list(MUST_ENCODE))
    def test_each_special_character_encoded(self, char):
        """Test every special character becomes its two-digit hex form."""
        assert encode_path_segment(char) == f"%{ord(char):02X}"

    def test_unreserved_punctuation_encoded(self):
        """Test '-._~' are encoded even though URLs allow them raw."""
        assert encode_path_segment("my-group/my_tool.v2~x") == (
            "my%2Dgroup%2Fmy%5Ftool%2Ev2%7Ex"
        )

    def test_non_ascii_encoded_as_utf8(self):
        """Test non-ASCII characters are encoded byte by byte."""
        assert encode_path_segment("é") == "%C3%A9"

    def test_empty_string(self):
        """Test empty input yields empty output."""
        assert encode_path_segment("") == ""

    def test_lone_surrogate_encoded(self):
        """Test strings that are not valid UTF-8 still encode."""
        assert encode_path_segment("a\udcffb") == "a%ED%B3%BFb"

    def test_lone_surrogate_decoded(self):
        """Test encoded surrogates decode back to the original string."""
        assert decode_path_segment("a%ED%B3%BFb") == "a\udcffb"

    def test_no_raw_special_characters_remain(self):
        """Test output never contains a raw must-encode character."""
        encoded = encode_path_segment("group/sub group/" + MUST_ENCODE)
        assert not any(c in encoded for c in MUST_ENCODE)

    @pytest.mark.parametrize(
        "value",
        ["acme/relctl", "a b%c", MUST_ENCODE, "100%", "%2F", "ünï/cødé"],
    )
    def test_idempotent_under_reencoding(self, value):
        """Test encode(decode(encode(s))) == encode(s)."""
        encoded = encode_path_segment(value)
        assert encode_path_segment(decode_path_segment(encoded)) == encoded


class TestDecodePathSegment:
    """Test decode_path_segment function."""

    def test_inverse_of_encode(self):
        """Test decoding restores the original string."""
        value = "acme/relctl " + MUST_ENCODE
        assert decode_path_segment(encode_path_segment(value)) == value
