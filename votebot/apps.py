from django.apps import AppConfig


class VotebotConfig(AppConfig):
    name = "votebot"
    default_auto_field = "django.db.models.BigAutoField"
