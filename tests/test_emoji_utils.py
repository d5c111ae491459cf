import discord
import pytest

from utils.emoji_utils import emoji_key, match_emoji, normalize_emoji

PARTY_ID = 1234567890123456789


@pytest.mark.parametrize('emoji,expected', [
    ('✅', '✅'),
    (' ✅ ', '✅'),
    (f'<:party:{PARTY_ID}>', f'<:party:{PARTY_ID}>'),
    (f'<a:party:{PARTY_ID}>', f'<:party:{PARTY_ID}>'),
    (discord.PartialEmoji(name='party', id=PARTY_ID, animated=True), f'<:party:{PARTY_ID}>'),
    (discord.PartialEmoji(name='party', id=PARTY_ID), f'<:party:{PARTY_ID}>'),
    (discord.PartialEmoji(name='✅'), '✅'),
])
def test_normalize_emoji(emoji, expected):
    assert normalize_emoji(emoji) == expected


def test_custom_emoji_are_compared_by_id():
    assert emoji_key(f'<a:party:{PARTY_ID}>') == emoji_key(f'<:renamed:{PARTY_ID}>') == str(PARTY_ID)


def test_match_emoji():
    tokens = ['✅', f'<:party:{PARTY_ID}>']

    assert match_emoji(tokens, discord.PartialEmoji(name='party', id=PARTY_ID, animated=True)) == tokens[1]
    assert match_emoji(tokens, '✅') == '✅'
    assert match_emoji(tokens, '🎮') is None
