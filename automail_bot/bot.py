"""
Main Discord bot application.
Initializes and runs the bot with the auto-mail module.
"""

import os
import sys
import discord
from discord.ext import commands

from automail_bot import config
from automail_bot.automail import setup as setup_automail
from automail_bot.logging_setup import configure_logging, get_logger

# Create module logger
logger = get_logger("bot")

# Setup bot with intents
intents = discord.Intents.default()
intents.message_content = True
bot = commands.Bot(command_prefix=config.COMMAND_PREFIX, intents=intents)


@bot.event
async def on_ready():
    """Called when bot is ready and connected to Discord"""
    logger.info(f"Bot is connected! Logged in as {bot.user}")
    logger.info(f"Bot is in {len(bot.guilds)} servers")
    for guild in bot.guilds:
        logger.info(f"- {guild.name} (id: {guild.id})")

    if bot.get_cog("AutoMailSchedules"):
        return

    logger.debug("Loading cogs...")
    try:
        await setup_automail(bot)
        logger.info("Auto-mail schedules loaded!")
    except Exception as e:
        logger.error(f"Error loading auto-mail schedules: {e}")


@bot.command(name="ping")
async def ping_command(ctx):
    """Simple ping command to test if bot is responsive"""
    logger.debug(f"Ping command received from {ctx.author}")
    await ctx.send("Pong! Bot is working!")


def main():
    configure_logging()

    token = os.getenv("DISCORD_TOKEN")
    if not token:
        logger.critical("ERROR: DISCORD_TOKEN environment variable not set!")
        sys.exit(1)

    logger.info("Starting bot...")
    try:
        bot.run(token)
    except discord.DiscordException as e:
        logger.critical(f"Failed to start bot: {e}")


if __name__ == "__main__":
    main()
