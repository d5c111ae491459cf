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

import asyncio
import os
from collections import defaultdict
from typing import Dict, Optional, DefaultDict

import aiofiles
from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator

from utils.emoji_utils import match_emoji, normalize_emoji
from utils.logging_formatter import bot_logger

DEFAULT_DATA_FILE = 'role_data.json'


class RoleMessageReference(BaseModel):
    """
    A Pydantic model that points to a guild's reaction-role message.

    Attributes:
        channel_id (int): The id of the channel the message was posted in.
        message_id (int): The id of the message.
    """

    channel_id: int
    message_id: int

    @field_serializer('channel_id', 'message_id')
    def serialize_id(self, value: int) -> str:
        """
        Snowflakes are persisted as strings.

        Parameters:
            value (int): The id to serialize.

        Returns:
            (str).
        """

        return str(value)


class PersistedState(BaseModel):
    """
    A Pydantic model for the durable state of the bot. This is always loaded and written as a whole.

    Attributes:
        role_emoji_map (Dict[str, Dict[str, str]]): A Guild.id: {Emoji: Role Name} mapping. Insertion order matters.
        role_messages (Dict[str, RoleMessageReference]): A Guild.id: RoleMessageReference mapping.
    """

    role_emoji_map: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    role_messages: Dict[str, RoleMessageReference] = Field(default_factory=dict)

    @field_validator('role_emoji_map')
    @classmethod
    def normalize_emoji_keys(cls, value: Dict[str, Dict[str, str]]) -> Dict[str, Dict[str, str]]:
        """
        Rewrites stored emoji in their token form, so files written with animated custom emoji still match reactions.

        Parameters:
            value (Dict[str, Dict[str, str]]): The loaded mapping.

        Returns:
            (Dict[str, Dict[str, str]]): The mapping with normalized emoji.
        """

        return {
            guild_id: {normalize_emoji(emoji): role_name for emoji, role_name in mapping.items()}
            for guild_id, mapping in value.items()
        }


async def load_state(path: str) -> PersistedState:
    """
    Loads the persisted state from the specified file.
    A missing, empty, or unreadable file never raises; an empty state is returned instead.
    Falling back from an unreadable file discards whatever that file contained.

    Parameters:
        path (str): The path of the state file.

    Returns:
        (PersistedState).
    """

    if not os.path.exists(path) or os.path.getsize(path) == 0:
        bot_logger.info(f'Role data file "{path}" not found or empty. Initializing with empty data.')
        return PersistedState()

    try:
        async with aiofiles.open(path, mode='r', encoding='utf-8') as f:
            raw = await f.read()
        state = PersistedState.model_validate_json(raw)
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        bot_logger.warning(f'Failed to parse role data file "{path}". Initializing with empty data. {e}')
        return PersistedState()

    bot_logger.info(
        f'Loaded role data: {len(state.role_emoji_map)} guild mapping(s), {len(state.role_messages)} role message(s).'
    )
    return state


class RoleStore:
    """
    Owns the emoji -> role mapping and role message reference of every guild.
    Every mutation rewrites the entire state file before returning.

    Attributes:
        path (str): The path of the state file.
        _state (PersistedState): The in-memory state.
        _locks (DefaultDict[int, asyncio.Lock]): Per-guild locks for read-modify-persist sequences.
        _save_lock (asyncio.Lock): Serializes whole-state writes across guilds.
    """

    def __init__(self, path: str = DEFAULT_DATA_FILE, state: Optional[PersistedState] = None) -> None:
        """
        The constructor for the RoleStore class.

        Parameters:
            path (str): The path of the state file.
            state (Optional[PersistedState]): The initial state. Defaults to an empty state.
        """

        self.path = path
        self._state = state if state is not None else PersistedState()
        self._locks: DefaultDict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._save_lock = asyncio.Lock()

    @classmethod
    async def from_file(cls, path: str = DEFAULT_DATA_FILE) -> 'RoleStore':
        """
        Creates a RoleStore from the state file at the specified path.

        Parameters:
            path (str): The path of the state file.

        Returns:
            (RoleStore).
        """

        return cls(path, await load_state(path))

    def lock(self, guild_id: int) -> asyncio.Lock:
        """
        Returns the lock guarding the specified guild's state.

        Parameters:
            guild_id (int): The id of the guild.

        Returns:
            (asyncio.Lock).
        """

        return self._locks[guild_id]

    def get(self, guild_id: int) -> Dict[str, str]:
        """
        Retrieves a copy of the guild's emoji -> role name mapping, in insertion order.

        Parameters:
            guild_id (int): The id of the guild.

        Returns:
            (Dict[str, str]): The mapping. Empty if the guild has none.
        """

        return dict(self._state.role_emoji_map.get(str(guild_id), {}))

    async def set(self, guild_id: int, emoji: str, role_name: str) -> None:
        """
        Inserts or overwrites the role for an emoji. Existing emoji keep their position and their stored token.

        Parameters:
            guild_id (int): The id of the guild.
            emoji (str): The emoji token.
            role_name (str): The name of the role.

        Returns:
            None.
        """

        mapping = self._state.role_emoji_map.setdefault(str(guild_id), {})
        mapping[match_emoji(mapping, emoji) or normalize_emoji(emoji)] = role_name
        await self.save()

    async def remove(self, guild_id: int, emoji: str) -> bool:
        """
        Removes the mapping for an emoji.

        Parameters:
            guild_id (int): The id of the guild.
            emoji (str): The emoji token.

        Returns:
            (bool): Whether a mapping was removed.
        """

        mapping = self._state.role_emoji_map.get(str(guild_id), {})

        if (token := match_emoji(mapping, emoji)) is None:
            return False

        del mapping[token]
        await self.save()
        return True

    def get_message_ref(self, guild_id: int) -> Optional[RoleMessageReference]:
        """
        Retrieves the guild's reaction-role message reference.

        Parameters:
            guild_id (int): The id of the guild.

        Returns:
            (Optional[RoleMessageReference]).
        """

        return self._state.role_messages.get(str(guild_id))

    async def set_message_ref(self, guild_id: int, reference: RoleMessageReference) -> None:
        """
        Replaces the guild's reaction-role message reference. The previous message is left untouched.

        Parameters:
            guild_id (int): The id of the guild.
            reference (RoleMessageReference): The new reference.

        Returns:
            None.
        """

        self._state.role_messages[str(guild_id)] = reference
        await self.save()

    async def save(self) -> None:
        """
        Writes the entire state to a temporary file and atomically replaces the state file with it.

        Parameters:
            None.

        Raises:
            OSError.

        Returns:
            None.
        """

        temporary_path = f'{self.path}.tmp'

        async with self._save_lock:
            payload = self._state.model_dump_json(indent=2)

            try:
                async with aiofiles.open(temporary_path, mode='w', encoding='utf-8') as f:
                    await f.write(payload)
                os.replace(temporary_path, self.path)
            except OSError as e:
                bot_logger.error(f'Failed to save role data to "{self.path}". {e}')
                raise
