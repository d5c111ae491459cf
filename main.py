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
from os import getenv
from sys import version

import discord
from dotenv import load_dotenv

from rolebot import RoleBot, Optionals, VERSION
from utils.logging_formatter import format_loggers, bot_logger
from utils.role_store import RoleStore, DEFAULT_DATA_FILE


async def main() -> None:
    """
    Driver method.
    """

    # logging setup
    format_loggers()

    bot_logger.info(f'Current RoleBot Version: {VERSION}')
    bot_logger.info(f'Current Python Version: {version}')
    bot_logger.info(f'Current Discord Version: {discord.__version__}')

    load_dotenv()

    # required
    token = getenv('DISCORD_TOKEN')
    data_file = getenv('DATA_FILE', DEFAULT_DATA_FILE)
    environment = getenv('ENVIRONMENT', 'DEV')

    if not token:
        raise RuntimeError('DISCORD_TOKEN not set. Create a .env file with DISCORD_TOKEN=your_token')

    # optionals
    disabled_cogs = [cog.strip() for cog in getenv('DISABLED_COGS', '').split(',') if cog.strip()]

    options: Optionals = {
        'disabled_cogs': disabled_cogs,
        'firebase_project': getenv('FIREBASE_PROJECT'),
        'sync_commands': getenv('SYNC_COMMANDS', 'true').lower() in ('1', 'true', 'yes')
    }

    store = await RoleStore.from_file(data_file)

    async with RoleBot(store, environment, options=options) as bot:
        await bot.start(token)


# Run the bot
if __name__ == '__main__':
    asyncio.run(main())
