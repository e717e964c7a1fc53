import pytest
from unittest.mock import AsyncMock, MagicMock
from loguru import logger

from automail_bot.automail.commands import AutoMailCommands
from automail_bot.automail.directory import Directory, DirectoryUser, MailGroup
from automail_bot.automail.storage import JsonScheduleStore

# Configure logging for tests
logger.remove()
logger.add(lambda msg: print(msg), level="INFO", colorize=False)


class MockContext:
    """Mock Discord Context for testing"""

    def __init__(self, channel_id=12345):
        self.bot = MagicMock()
        self.bot.wait_for = AsyncMock()
        self.channel = MagicMock()
        self.channel.id = channel_id
        self.author = MagicMock()
        self.author.name = "TestUser"
        self.author.id = 987654321
        self.author.bot = False
        self.send = AsyncMock(return_value=MagicMock())

    @property
    def sent_texts(self):
        """Plain text messages sent through ctx.send"""
        return [c.args[0] for c in self.send.call_args_list if c.args]

    @property
    def sent_embeds(self):
        """Embeds sent through ctx.send"""
        return [c.kwargs["embed"] for c in self.send.call_args_list if "embed" in c.kwargs]


@pytest.fixture
def mock_context():
    """Fixture for a mock Discord context"""
    return MockContext()


@pytest.fixture
def store(tmp_path):
    """Fixture for an empty JSON schedule store"""
    return JsonScheduleStore(str(tmp_path / "schedules.json"))


@pytest.fixture
def directory():
    """Fixture for a small mail group and user directory"""
    return Directory(
        mail_groups={
            "g1": MailGroup(id="g1", name="Managers", emails=("boss@acme.com",)),
            "g2": MailGroup(id="g2", name="Sales Team", emails=("s1@acme.com", "s2@acme.com")),
        },
        users={
            "u1": DirectoryUser(id="u1", email=" Alice@Acme.com ", display_name="Alice Smith", username="alice"),
            "u2": DirectoryUser(id="u2", email="bob@acme.com", display_name="Bob Jones", username="bob", title="Engineer"),
            "u3": DirectoryUser(id="u3", email="carol@acme.com", display_name="Carol", is_active=False),
        },
    )


@pytest.fixture
def automail_commands(store, directory):
    """Fixture for command handlers over a temporary store"""
    return AutoMailCommands(store, directory)
