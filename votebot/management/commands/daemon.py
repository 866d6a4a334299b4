"""Management command to run a bot session for every registered team."""

import logging

from django.conf import settings
from django.core.management.base import BaseCommand

from votebot.logcontext import configure_console_logging
from votebot.supervisor import SessionSupervisor

logger = logging.getLogger("votebot")


class Command(BaseCommand):
    help = "Perform the botly duties: connect every team and handle votes"

    def handle(self, *args, **options):
        configure_console_logging(settings.VOTEBOT_LOG_LEVEL)

        logger.info("Starting votebot sessions...")
        SessionSupervisor().run()
