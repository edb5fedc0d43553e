"""
Tests for the command-line interface.
"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from networking_coach.cli import main
from networking_coach.config import config


@pytest.fixture
def runner():
    return CliRunner()


class TestOfflineCommands:

    def test_types(self, runner):
        result = runner.invoke(main, ["types"])

        assert result.exit_code == 0
        assert "Message Types" in result.output
        assert "linkedin" in result.output

    def test_render(self, runner):
        result = runner.invoke(main, ["render", "-n", "Sarah", "-c", "Acme", "--type", "linkedin"])

        assert result.exit_code == 0
        assert "LinkedIn Connection Request" in result.output
        assert "Hi Sarah," in result.output

    def test_render_empty_company(self, runner):
        result = runner.invoke(main, ["render", "-n", "Sarah", "-c", ""])

        assert result.exit_code == 2

    def test_render_unknown_type(self, runner):
        result = runner.invoke(main, ["render", "-n", "Sarah", "-c", "Acme", "--type", "fax"])

        assert result.exit_code == 2

    def test_starters(self, runner):
        result = runner.invoke(main, ["starters", "--limit", "2"])

        assert result.exit_code == 0
        assert result.output.count("•") == 2


class TestGenerateAndHistory:

    def test_generate_and_save(self, runner, make_user, openai_client):
        """A generated message can be saved and shows up in history."""
        make_user("alice@example.edu")

        with patch("networking_coach.generate_message.get_client", return_value=openai_client):
            result = runner.invoke(main, [
                "generate", "-n", "Sarah", "-c", "Microsoft", "--save-as", "alice@example.edu",
            ])

        assert result.exit_code == 0, result.output
        assert "Saved to history" in result.output

        history = runner.invoke(main, ["history", "alice@example.edu"])
        assert history.exit_code == 0
        assert "Message History (1)" in history.output

    def test_generate_failure(self, runner, openai_client):
        with patch.object(config, "OPENAI_API_KEY", ""):
            result = runner.invoke(main, ["generate", "-n", "Sarah", "-c", "Microsoft"])

        assert result.exit_code == 1
        assert "OpenAI API key not configured" in result.output

    def test_history_unknown_user(self, runner):
        result = runner.invoke(main, ["history", "nobody@example.edu"])

        assert result.exit_code == 1
        assert "No account" in result.output

    def test_history_empty(self, runner, make_user):
        make_user("alice@example.edu")

        result = runner.invoke(main, ["history", "alice@example.edu"])

        assert result.exit_code == 0
        assert "No messages generated yet." in result.output

    def test_history_table(self, runner, make_user):
        """Saved messages are listed, and --favorites narrows the list."""
        from networking_coach.database import get_db
        from networking_coach.message_templates import MessageData
        from networking_coach.services import MessageService

        alice = make_user("alice@example.edu")
        with get_db(alice.id) as db:
            service = MessageService(db, alice)
            kept = service.create(MessageData("Sarah", "Acme", "Engineer"), "Hi Sarah, " + "x" * 100)
            service.create(MessageData("Omar", "Initech", message_type="mentor-request"), "Hello Omar")
            service.toggle_favorite(kept.id)

        result = runner.invoke(main, ["history", "alice@example.edu"])

        assert result.exit_code == 0, result.output
        assert "Message History (2)" in result.output
        assert "Sarah" in result.output
        assert "Omar" in result.output
        assert "♥" in result.output

        favorites = runner.invoke(main, ["history", "alice@example.edu", "--favorites"])

        assert "Message History (1)" in favorites.output
        assert "Omar" not in favorites.output
