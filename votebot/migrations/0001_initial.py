import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Team",
            fields=[
                ("team_id", models.CharField(max_length=32, primary_key=True, serialize=False)),
                ("name", models.CharField(db_column="team_name", max_length=255)),
                ("auth_token", models.CharField(db_column="team_authtoken", max_length=255)),
            ],
            options={
                "db_table": "teams",
            },
        ),
        migrations.CreateModel(
            name="Member",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=32)),
                ("name", models.CharField(db_column="user_name", max_length=255)),
                ("is_bot", models.BooleanField(db_column="user_is_bot", default=False)),
                (
                    "team",
                    models.ForeignKey(
                        db_column="team_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="members",
                        to="votebot.team",
                    ),
                ),
            ],
            options={
                "db_table": "users",
                "constraints": [
                    models.UniqueConstraint(fields=("team", "user_id"), name="users_team_user_uniq"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Topic",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("channel", models.CharField(db_column="topic_channel", max_length=32)),
                ("name", models.CharField(db_column="topic_name", max_length=255)),
                ("comment", models.TextField(blank=True, db_column="topic_comment", null=True)),
                ("is_open", models.BooleanField(db_column="topic_open", default=True)),
                (
                    "team",
                    models.ForeignKey(
                        db_column="team_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="topics",
                        to="votebot.team",
                    ),
                ),
            ],
            options={
                "db_table": "topics",
                "constraints": [
                    models.UniqueConstraint(fields=("team", "name"), name="topics_team_name_uniq"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Vote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("topic_name", models.CharField(max_length=255)),
                ("user_id", models.CharField(max_length=32)),
                ("value", models.DecimalField(db_column="vote_value", decimal_places=2, max_digits=12)),
                ("comment", models.TextField(blank=True, db_column="vote_comment", null=True)),
                (
                    "team",
                    models.ForeignKey(
                        db_column="team_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="votes",
                        to="votebot.team",
                    ),
                ),
            ],
            options={
                "db_table": "votes",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("team", "topic_name", "user_id"), name="votes_team_topic_user_uniq",
                    ),
                ],
            },
        ),
    ]
