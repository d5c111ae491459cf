"""
MIT License

Copyright (c) 2019-Present Jake Sichley

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""
from typing import Iterable, Optional, Union

import discord

EmojiLike = Union[discord.Emoji, discord.PartialEmoji, str]


def _as_emoji(emoji: EmojiLike) -> Union[discord.Emoji, discord.PartialEmoji]:
    return discord.PartialEmoji.from_str(emoji.strip()) if isinstance(emoji, str) else emoji


def normalize_emoji(emoji: EmojiLike) -> str:
    """
    Returns the emoji token for an emoji.
    Unicode emoji are their own token. Custom emoji are written as '<:name:id>', whether or not they're animated,
    since reaction removal events don't always say whether the emoji was animated.

    Parameters:
        emoji (EmojiLike): The emoji, or a string representation of it.

    Returns:
        (str): The emoji token.
    """

    emoji = _as_emoji(emoji)

    if emoji.id is None:
        return str(emoji.name)

    return f'<:{emoji.name or "_"}:{emoji.id}>'


def emoji_key(emoji: EmojiLike) -> str:
    """
    Returns the value two emoji are compared by: the id of a custom emoji, or the token of a unicode emoji.

    Parameters:
        emoji (EmojiLike): The emoji, or a string representation of it.

    Returns:
        (str): The comparison key.
    """

    emoji = _as_emoji(emoji)
    return str(emoji.id) if emoji.id is not None else str(emoji.name)


def match_emoji(tokens: Iterable[str], emoji: EmojiLike) -> Optional[str]:
    """
    Finds the token that refers to the same emoji.

    Parameters:
        tokens (Iterable[str]): The candidate emoji tokens.
        emoji (EmojiLike): The emoji to find.

    Returns:
        (Optional[str]): The matching token, if any.
    """

    key = emoji_key(emoji)
    return next((token for token in tokens if emoji_key(token) == key), None)
