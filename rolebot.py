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

from datetime import datetime
from os import listdir, path
from sys import stderr, exc_info
from traceback import print_exception, format_exception
from typing import Optional, List, TypedDict, Any

import discord
from discord.ext.commands import ExtensionError, Bot, when_mentioned
from google.cloud import errorreporting_v1beta1 as error_reporting

from utils.event_queue import GuildEventQueue
from utils.logging_formatter import bot_logger
from utils.reconciler import MessageReconciler
from utils.role_commands import RoleMappingCommands
from utils.role_grants import RoleGrantService
from utils.role_provisioner import RoleProvisioner
from utils.role_store import RoleStore

VERSION = '1.0.0'
COGS_DIRECTORY = path.join(path.dirname(path.abspath(__file__)), 'cogs')

Optionals = TypedDict(
    'Optionals',
    {
        'disabled_cogs': List[str],
        'firebase_project': Optional[str],
        'sync_commands': bool
    },
    total=False
)


class RoleBot(Bot):
    """
    A commands.Bot subclass that contains the main bot implementation.

    Attributes:
        store (RoleStore): The emoji -> role mapping and role message store.
        event_queue (GuildEventQueue): The ordered queue every command and reaction event is handled through.
        provisioner (RoleProvisioner): Resolves role names to roles.
        reconciler (MessageReconciler): Keeps role messages in line with their mappings.
        role_grants (RoleGrantService): Grants and revokes roles in response to reactions.
        role_commands (RoleMappingCommands): The administrator operations.
        uptime (datetime.datetime): The time the bot was initialized.
        environment (str): Environment string. Disable features (such as error reporting) when not 'PROD'.
        _disabled_cogs (List[str]): A list of cogs the bot should not load on initialization.
        _sync_commands (bool): Whether to sync the application command tree during setup.
        _firebase_project (Optional[str]): The name of the bot's Firebase project.
        _reporting_client (Optional[ReportErrorsServiceAsyncClient]): The Firebase reporting client.
    """

    def __init__(self, store: RoleStore, environment: str, options: Optional[Optionals] = None) -> None:
        """
        The constructor for the RoleBot class.

        Parameters:
            store (RoleStore): The loaded mapping store.
            environment (str): Environment string. Disable features (such as error reporting) when not 'PROD'.
            options (Optional[Optionals]): Additional setup features for the bot.
                disabled_cogs (List[str]): Cogs that should not be loaded.
                firebase_project (str): The name of the bot's Firebase project.
                sync_commands (bool): Whether to sync the application command tree during setup.

        Returns:
            None.
        """

        intents = discord.Intents(guilds=True, members=True, messages=True, reactions=True)

        super().__init__(command_prefix=when_mentioned, intents=intents)

        self.store = store
        self.event_queue = GuildEventQueue(store)
        self.provisioner = RoleProvisioner()
        self.reconciler = MessageReconciler(self)
        self.role_grants = RoleGrantService(self, store, self.provisioner)
        self.role_commands = RoleMappingCommands(store, self.provisioner, self.reconciler)
        self.uptime = datetime.now()
        self.environment = environment

        # optionals
        options = options or Optionals()
        self._disabled_cogs: List[str] = options.get('disabled_cogs', [])
        self._sync_commands: bool = options.get('sync_commands', True)
        self._firebase_project = options.get('firebase_project', None)
        self._reporting_client = None

        if environment == 'PROD' and self._firebase_project:
            self._reporting_client = error_reporting.ReportErrorsServiceAsyncClient.from_service_account_file(
                r'firebase-auth.json'
            )

    async def setup_hook(self) -> None:
        """
        A coroutine to be called to set up the bot.

        Parameters:
            None.

        Returns:
            None.
        """

        self.event_queue.start()

        # load our cogs
        for cog in listdir(COGS_DIRECTORY):
            # only load python files that we haven't explicitly disabled
            if cog.endswith('.py') and cog[:-3] not in self._disabled_cogs:
                try:
                    await self.load_extension(f'cogs.{cog[:-3]}')
                except ExtensionError as error:
                    bot_logger.error(f'Failed Setup for Cog: {cog[:-3].capitalize()}. {error}')
                    print_exception(type(error), error, error.__traceback__, file=stderr)

        if self._sync_commands:
            synced = await self.tree.sync()
            bot_logger.info(f'Synced {len(synced)} application command(s).')

    async def on_ready(self) -> None:
        """
        A listener method that is called when the bot has finished preparing its cache.

        Parameters:
            None.

        Returns:
            None.
        """

        bot_logger.info(f'Bot is ready! Logged in as {self.user} in {len(self.guilds)} guild(s).')

    async def close(self) -> None:
        """
        Stops the event queue before closing the connection to Discord.

        Parameters:
            None.

        Returns:
            None.
        """

        await self.event_queue.stop()
        await super().close()

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        """
        Handles exceptions that escape event listeners, such as a reaction event that couldn't be queued.
        The exception is logged with the guild it happened in, when the event carries one, and then reported.

        Parameters:
            event_method (str): The name of the listener that raised.
            *args (Any): The listener's arguments.
            **kwargs (Any): The listener's keyword-arguments.

        Returns:
            None.
        """

        _, exception, _ = exc_info()

        if not isinstance(exception, Exception):
            await super().on_error(event_method, *args, **kwargs)
            return

        guild_id = next((arg.guild_id for arg in args if hasattr(arg, 'guild_id')), None)
        bot_logger.error(
            f"Encountered exception in '{event_method}' [Guild ID: {guild_id}]",
            exc_info=(type(exception), exception, exception.__traceback__),
        )

        await self.report_exception(exception)

    async def report_exception(self, exception: Exception) -> None:
        """
        Reports an exception to the bot's Firebase Error Reporting dashboard.

        Parameters:
            exception (Exception): The encountered exception.

        Returns:
            None.
        """

        if self._reporting_client and self._firebase_project:
            payload = generate_error_event(exception, self._firebase_project)
            await self._reporting_client.report_error_event(payload)


def generate_error_event(exception: Exception, project_name: str) -> error_reporting.ReportErrorEventRequest:
    """
    Builds the Error Reporting request for an exception, tagged with the RoleBot service and version so reports from
    different deployments can be told apart.

    Parameters:
        exception (Exception): The encountered error.
        project_name (str): The name of the Firebase project.

    Returns:
        (errorreporting_v1beta1.ReportErrorEventRequest): The request payload.
    """

    event = error_reporting.ReportedErrorEvent(
        message=''.join(format_exception(type(exception), exception, exception.__traceback__)),
        service_context=error_reporting.ServiceContext(service='RoleBot', version=VERSION)
    )

    # noinspection PyTypeChecker
    return error_reporting.ReportErrorEventRequest(project_name=project_name, event=event)
