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
from discord.app_commands.errors import CheckFailure


class InvocationCheckFailure(CheckFailure):
    """
    Raised while a role command runs to abort it before any state is modified.
    The message is displayed to the invoker.
    """

    def __init__(self, message: str) -> None:
        """
        The constructor for the InvocationCheckFailure class.

        Parameters:
            message (str): The message displayed to the invoker.

        Returns:
            None.
        """

        self.message = message
        super(CheckFailure, self).__init__(message)


class MissingMappingInput(InvocationCheckFailure):
    """
    Raised when a mapping is added without an emoji or a role name.
    """

    def __init__(self) -> None:
        super().__init__('Please provide both an emoji and a role name.')


class RoleUnavailable(InvocationCheckFailure):
    """
    Raised when the role for a new mapping could neither be found nor created.

    Attributes:
        role_name (str): The name of the role.
    """

    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__(f"I wasn't able to find or create the role **{role_name}**.")


class RoleChannelNotFound(InvocationCheckFailure):
    """
    Raised when the channel for a role message doesn't exist in the guild, or isn't one messages can be sent in.

    Attributes:
        channel_id (str): The channel id as it was provided.
    """

    def __init__(self, channel_id: str) -> None:
        self.channel_id = channel_id
        super().__init__('Channel not found. Please use a valid channel ID.')


class NoRoleMappings(InvocationCheckFailure):
    """
    Raised when a role message is requested for a guild with no mappings.
    """

    def __init__(self) -> None:
        super().__init__('No role mappings set up. Use /addrole to add role mappings first.')


class RoleMessageUnavailable(InvocationCheckFailure):
    """
    Raised when the role message couldn't be sent in the designated channel.

    Attributes:
        channel_id (int): The id of the channel.
    """

    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        super().__init__(f"I wasn't able to send the role selection message in <#{channel_id}>.")
