"""Forms for the board blueprint."""

from flask_wtf import FlaskForm
from wtforms import RadioField, StringField, SubmitField

from matchboard.constants import TEAM1, TEAM2, TEAM_LABELS


class JoinForm(FlaskForm):
    """Sign-up dialog for one match.

    Field checks live in ``BoardSession.add_player`` so that they run in a
    fixed order and stop at the first problem.
    """

    name = StringField("ФИО")
    phone = StringField("Номер телефона")
    team = RadioField(
        "Команда",
        choices=[(TEAM1, TEAM_LABELS[TEAM1]), (TEAM2, TEAM_LABELS[TEAM2])],
        validate_choice=False,
    )
    submit = SubmitField("Подтвердить запись")
