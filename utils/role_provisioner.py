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

from typing import Optional

import discord

from utils.logging_formatter import bot_logger


class RoleProvisioner:
    """
    Resolves role names to roles within a guild, creating them when required.

    The first role with a matching name wins; duplicate names are not detected.
    Creation is not guarded against concurrent callers: two callers resolving the same missing name at the same time
    can both create a role, leaving the guild with two roles of that name.
    """

    @staticmethod
    def find_role(guild: discord.Guild, role_name: str) -> Optional[discord.Role]:
        """
        Looks up a role by its exact name.

        Parameters:
            guild (discord.Guild): The guild to search.
            role_name (str): The name of the role.

        Returns:
            (Optional[discord.Role]): The first role with the given name, if any.
        """

        return discord.utils.get(guild.roles, name=role_name)

    async def ensure_role(self, guild: discord.Guild, role_name: str) -> discord.Role:
        """
        Looks up a role by its exact name, creating it with default settings if it doesn't exist.

        Parameters:
            guild (discord.Guild): The guild to search.
            role_name (str): The name of the role.

        Raises:
            discord.HTTPException.

        Returns:
            (discord.Role): The existing or newly created role.
        """

        if role := self.find_role(guild, role_name):
            return role

        role = await guild.create_role(name=role_name, reason='Reaction Roles - Role Creation')
        bot_logger.info(f'Created new role: {role_name} [Guild ID: {guild.id}]')
        return role
