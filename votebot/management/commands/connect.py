"""Management command to register a Slack team with its bot token."""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from votebot.logcontext import configure_console_logging
from votebot.manager import AddTeamRequest, ManagementError, get_manager


class Command(BaseCommand):
    help = "Add a team: verify a Slack bot token and store it"

    def add_arguments(self, parser):
        parser.add_argument("authtoken", help="Slack bot token for the team")

    def handle(self, *args, **options):
        configure_console_logging(settings.VOTEBOT_LOG_LEVEL)

        manager = get_manager()
        try:
            result = manager.add_team(AddTeamRequest(auth_token=options["authtoken"]))
        except ManagementError as exc:
            raise CommandError(f"Error: {exc}")

        self.stdout.write(self.style.SUCCESS(
            f"Connected to team {result.name} as {result.username}"
        ))
