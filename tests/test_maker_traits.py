"""
Maker traits bitfield tests.

Run with:
    pytest tests/test_maker_traits.py -v
"""

import pytest

from lopext.traits import (
    MakerTraitFlags,
    MakerTraitSubfields,
    MakerTraits,
    pack,
    parse_maker_traits,
    unpack,
)


# ============================================================================
# Pack / unpack
# ============================================================================


class TestPackUnpack:

    def test_default_is_zero(self):
        assert pack(MakerTraitFlags(), MakerTraitSubfields()) == 0
        assert MakerTraits.default().as_int() == 0

    def test_zero_unpacks_to_defaults(self):
        flags, subfields = unpack(0)
        assert flags == MakerTraitFlags()
        assert flags.allow_partial_fills is True
        assert subfields.allowed_sender is None
        assert subfields.expiration is None
        assert subfields.nonce_or_epoch is None
        assert subfields.series == 0

    def test_no_partial_fills_sets_bit_255(self):
        value = pack(MakerTraitFlags(allow_partial_fills=False), MakerTraitSubfields())
        assert value == 1 << 255

    @pytest.mark.parametrize("name,bit", [
        ("allow_multiple_fills", 254),
        ("has_pre_interaction", 252),
        ("has_post_interaction", 251),
        ("need_epoch_check", 250),
        ("has_extension", 249),
        ("use_permit2", 248),
        ("unwrap_weth", 247),
    ])
    def test_flag_bit_positions(self, name, bit):
        value = pack(MakerTraitFlags(**{name: True}), MakerTraitSubfields())
        assert value == 1 << bit
        flags, _ = unpack(value)
        assert getattr(flags, name) is True

    def test_round_trip_all_fields(self):
        flags = MakerTraitFlags(
            allow_partial_fills=False,
            allow_multiple_fills=True,
            has_pre_interaction=True,
            has_post_interaction=False,
            need_epoch_check=True,
            has_extension=True,
            use_permit2=False,
            unwrap_weth=True,
        )
        subfields = MakerTraitSubfields(
            allowed_sender=0xABCDEF0123456789ABCD,
            expiration=1_700_000_000,
            nonce_or_epoch=42,
            series=7,
        )
        assert unpack(pack(flags, subfields)) == (flags, subfields)

    def test_subfield_offsets(self):
        value = pack(MakerTraitFlags(), MakerTraitSubfields(expiration=1, nonce_or_epoch=1, series=1))
        assert value == (1 << 80) | (1 << 120) | (1 << 160)

    def test_oversized_subfield_is_truncated(self):
        value = pack(MakerTraitFlags(), MakerTraitSubfields(expiration=(1 << 40) + 5))
        _, subfields = unpack(value)
        assert subfields.expiration == 5

    def test_negative_subfield_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            pack(MakerTraitFlags(), MakerTraitSubfields(series=-1))

    def test_unpack_out_of_range(self):
        with pytest.raises(ValueError, match="uint256"):
            unpack(1 << 256)
        with pytest.raises(ValueError):
            unpack(-1)

    def test_zero_subfields_normalize_to_none(self):
        subfields = MakerTraitSubfields(allowed_sender=0, expiration=0, nonce_or_epoch=0)
        assert subfields.allowed_sender is None
        assert subfields.expiration is None
        assert subfields.nonce_or_epoch is None


# ============================================================================
# Immutable value API
# ============================================================================


class TestMakerTraits:

    def test_with_methods_return_new_instances(self):
        base = MakerTraits.default()
        updated = base.with_expiration(1000).with_nonce(3)
        assert base.as_int() == 0
        assert updated.subfields.expiration == 1000
        assert updated.subfields.nonce_or_epoch == 3

    def test_with_epoch_enables_check(self):
        traits = MakerTraits.default().with_epoch(series=2, epoch=9)
        assert traits.flags.need_epoch_check is True
        assert traits.subfields.series == 2
        assert traits.subfields.nonce_or_epoch == 9

    def test_with_allowed_sender_keeps_low_80_bits(self):
        sender = "0x" + "11" * 10 + "abcdef0123456789abcd"
        traits = MakerTraits.default().with_allowed_sender(sender)
        assert traits.subfields.allowed_sender == 0xABCDEF0123456789ABCD
        assert MakerTraits.default().with_allowed_sender(None).subfields.allowed_sender is None

    def test_from_int_round_trip(self):
        traits = MakerTraits.default().with_flags(allow_multiple_fills=True).with_expiration(99)
        assert MakerTraits.from_int(int(traits)) == traits

    def test_is_expired(self):
        traits = MakerTraits.default().with_expiration(1000)
        assert traits.is_expired(1000) is True
        assert traits.is_expired(999) is False
        assert MakerTraits.default().is_expired(10**12) is False

    def test_extension_slots(self):
        traits = MakerTraits.default().with_extension_slots(True, True, False)
        assert traits.flags.has_extension
        assert traits.flags.has_pre_interaction
        assert not traits.flags.has_post_interaction


class TestParseMakerTraits:

    def test_parse_int(self):
        value = MakerTraits.default().with_flags(has_extension=True).with_expiration(500).as_int()
        parsed = parse_maker_traits(value)
        assert parsed["has_extension"] is True
        assert parsed["allow_partial_fills"] is True
        assert parsed["expiration"] == 500
        assert parsed["allowed_sender"] is None

    def test_parse_renders_allowed_sender_as_hex(self):
        value = pack(MakerTraitFlags(), MakerTraitSubfields(allowed_sender=0xFF))
        assert parse_maker_traits(value)["allowed_sender"] == "000000000000000000ff"

    def test_parse_order_like(self):
        class Holder:
            maker_traits = 1 << 255

        assert parse_maker_traits(Holder())["allow_partial_fills"] is False
