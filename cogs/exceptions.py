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

from sys import stderr
from traceback import print_exception

from discord import Interaction
from discord import app_commands
from discord.ext import commands

from rolebot import RoleBot
from utils.checks import InvocationCheckFailure
from utils.logging_formatter import bot_logger


class Exceptions(commands.Cog):
    """
    A Cogs class that provides centralized exception handling for the bot's app commands.

    Attributes:
        bot (RoleBot): The Discord bot.
    """

    def __init__(self, bot: RoleBot) -> None:
        """
        The constructor for the Exceptions class.

        Parameters:
            bot (RoleBot): The Discord bot.
        """

        self.bot = bot
        bot.tree.on_error = self.on_app_command_error  # type: ignore[assignment]

    async def on_app_command_error(self, interaction: Interaction, error: app_commands.AppCommandError) -> None:
        """
        A listener method that is called whenever an app command encounters an error.
        User-facing exceptions answer the invoker with why the command failed. Other exceptions are logged and reported.

        Parameters:
            interaction (Interaction): The invocation interaction.
            error (AppCommandError): The app command error.

        Returns:
            None.
        """

        if isinstance(error, InvocationCheckFailure):
            await self.respond(interaction, error.message)
            return

        if isinstance(error, app_commands.TransformerError):
            await self.respond(interaction, f'{error}')
            return

        if isinstance(error, (app_commands.MissingPermissions, app_commands.NoPrivateMessage)):
            await self.respond(
                interaction, f'{interaction.user.mention}, you do not have permission to use this command!'
            )
            return

        if isinstance(error, app_commands.CheckFailure):
            command_name = interaction.command.qualified_name if interaction.command else 'Unknown'
            await self.respond(
                interaction, f'One or more checks failed during the invocation of command: `{command_name}`.'
            )
            return

        if isinstance(error, app_commands.CommandInvokeError):
            error = error.original  # type: ignore[assignment]

        bot_logger.warning(
            f'Encountered AppCommandError in command '
            f'{interaction.command.qualified_name if interaction.command else "Unknown"}. '
            f'User: `{interaction.user}` Guild: `{interaction.guild.id if interaction.guild is not None else "None"}`\n'
        )
        print_exception(type(error), error, error.__traceback__, file=stderr)

        await self.respond(interaction, 'Something went wrong while running this command. Please try again later.')
        await self.bot.report_exception(error)

    @staticmethod
    async def respond(interaction: Interaction, content: str) -> None:
        """
        Answers the interaction, following up if it was already acknowledged.

        Parameters:
            interaction (Interaction): The invocation interaction.
            content (str): The response content.

        Returns:
            None.
        """

        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)


async def setup(bot: RoleBot) -> None:
    """
    A setup function that allows the cog to be treated as an extension.

    Parameters:
        bot (RoleBot): The bot the cog should be added to.

    Returns:
        None.
    """

    await bot.add_cog(Exceptions(bot))
    bot_logger.info('Completed Setup for Cog: Exceptions')
