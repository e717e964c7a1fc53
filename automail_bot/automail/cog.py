"""
Discord cog for automatic report-mail schedules.
Exposes the !automail command group.
"""

from discord.ext import commands
from loguru import logger

from automail_bot import config

from .commands import AutoMailCommands
from .directory import Directory
from .storage import JsonScheduleStore


class AutoMailSchedules(commands.Cog):
    """Discord cog for configuring recurring report mails"""

    def __init__(self, bot, store: JsonScheduleStore, directory: Directory):
        """
        Initialize the auto-mail cog.

        Args:
            bot: Discord bot instance
            store: Schedule store
            directory: Mail group and user lookups
        """
        self.bot = bot
        self.store = store
        self.directory = directory
        self.commands = AutoMailCommands(store, directory)
        logger.info("Auto-mail cog initialized")

    def cog_unload(self):
        """Flush schedules when the cog is unloaded"""
        logger.info("Unloading AutoMailSchedules cog")
        self.store.save()

    @commands.group(name="automail", invoke_without_command=True)
    async def automail(self, ctx):
        """Command group for auto-mail schedules"""
        logger.debug(f"{ctx.author} used automail command without subcommand")
        await ctx.send(
            "Use `!automail options`, `!automail create`, `!automail edit`, `!automail list`, "
            "`!automail show`, `!automail delete`, `!automail groups` or `!automail users`"
        )

    @automail.command(name="options")
    async def options(self, ctx, report_type: str = None, period: str = None):
        """Show the periods and send cadences available

        Examples:
        !automail options                  - All periods and cadences
        !automail options TARGETS          - Periods and cadences for target reports
        !automail options PERFORMANCE yearly
        """
        await self.commands.show_options(ctx, report_type, period)

    @automail.command(name="create")
    async def create(self, ctx, *args):
        """Create an auto-mail schedule

        Examples:
        !automail create type=TARGETS period=weekly cadence=1W at=09:00 day=monday to=group:g1
        !automail create type=PERFORMANCE period=yearly cadence=1Y at=08:30 to=a@b.com,user:42
        """
        await self.commands.create_schedule(ctx, args)

    @automail.command(name="edit")
    async def edit(self, ctx, schedule_id: str, *args):
        """Replace fields of an auto-mail schedule

        Examples:
        !automail edit 3f2c... cadence=1M day=15
        !automail edit 3f2c... to=group:g2 at=07:00
        """
        await self.commands.edit_schedule(ctx, schedule_id, args)

    @automail.command(name="show")
    async def show(self, ctx, schedule_id: str):
        """Show one auto-mail schedule"""
        await self.commands.show_schedule(ctx, schedule_id)

    @automail.command(name="list")
    async def list_(self, ctx, page: int = 1, sort_key: str = "reportTypes", direction: str = "asc", *, needle: str = ""):
        """List auto-mail schedules

        Examples:
        !automail list                       - First page
        !automail list 2 interval desc       - Page 2 sorted by interval, descending
        !automail list 1 emails asc acme.com - Only schedules mentioning acme.com
        """
        await self.commands.list_schedules(ctx, page, sort_key, direction, needle)

    @automail.command(name="delete")
    async def delete(self, ctx, schedule_id: str):
        """Delete an auto-mail schedule"""
        await self.commands.delete_schedule(ctx, schedule_id)

    @automail.command(name="groups")
    async def groups(self, ctx, *, needle: str = ""):
        """List mail groups"""
        await self.commands.list_groups(ctx, needle)

    @automail.command(name="users")
    async def users(self, ctx, *, needle: str = ""):
        """List active users"""
        await self.commands.list_users(ctx, needle)


async def setup(bot):
    """Add the AutoMailSchedules cog to the bot"""
    store = JsonScheduleStore(config.SCHEDULES_FILE)
    store.load()
    directory = Directory.load(config.DIRECTORY_FILE)

    automail = AutoMailSchedules(bot, store, directory)
    await bot.add_cog(automail)
    return automail
