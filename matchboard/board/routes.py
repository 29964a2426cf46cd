"""Routes for the board blueprint."""

from flask import (
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from matchboard.constants import (
    CATEGORY_ERROR,
    CATEGORY_SUCCESS,
    MSG_JOIN_FAILED,
    MSG_JOIN_SUCCESS,
    MSG_LEAVE_FAILED,
    MSG_LEAVE_SUCCESS,
    MSG_MATCH_NOT_FOUND,
    TEAM_KEYS,
    TEAM_LABELS,
)
from matchboard.errors import NotFoundError, ValidationError

from . import bp
from .forms import JoinForm


def get_board():
    """Return the board session owned by the current app."""
    return current_app.extensions["board_session"]


@bp.route("/")
def index():
    """Show every match with its rosters and the reset countdown."""
    board = get_board()
    for notification in board.drain_notifications():
        flash(notification.message, notification.category)

    if not board.is_ready:
        return render_template("board/loading.html")

    # An empty value collapses whatever is expanded
    expanded = request.args.get("expanded")
    if expanded is not None:
        session["expanded_match"] = expanded or None

    return render_template(
        "board/index.html",
        matches=board.matches,
        countdown=board.countdown,
        expanded_match=session.get("expanded_match"),
        team_keys=TEAM_KEYS,
        team_labels=TEAM_LABELS,
    )


@bp.route("/match/<string:match_id>/join", methods=["GET", "POST"])
def join_match(match_id):
    """Sign up for one team of a match."""
    board = get_board()
    match = board.find_match(match_id)
    if match is None:
        raise NotFoundError(MSG_MATCH_NOT_FOUND)

    form = JoinForm()
    error = None
    if form.validate_on_submit():
        try:
            pending = board.add_player(
                match_id, form.name.data, form.phone.data, form.team.data
            )
            player = pending.result(timeout=current_app.config["WRITE_TIMEOUT"])
        except ValidationError as e:
            error = e.message
        except NotFoundError:
            raise
        except Exception as e:
            current_app.logger.error(f"Error joining match {match_id}: {e}")
            flash(f"{MSG_JOIN_FAILED}: {e}", CATEGORY_ERROR)
        else:
            current_app.logger.info(
                f"Player {player['id']} joined {form.team.data} of match {match_id}"
            )
            flash(MSG_JOIN_SUCCESS, CATEGORY_SUCCESS)
            session["expanded_match"] = match_id
            return redirect(url_for(".index"))

    return render_template(
        "board/join.html",
        form=form,
        match=match,
        error=error,
        team_labels=TEAM_LABELS,
    )


@bp.route(
    "/match/<string:match_id>/<string:team>/<string:player_id>/remove",
    methods=["POST"],
)
def remove_player(match_id, team, player_id):
    """Take a player off a roster."""
    if team not in TEAM_KEYS:
        raise NotFoundError(MSG_MATCH_NOT_FOUND)

    board = get_board()
    if board.find_match(match_id) is None:
        return redirect(url_for(".index"))

    try:
        board.remove_player(match_id, team, player_id).result(
            timeout=current_app.config["WRITE_TIMEOUT"]
        )
        flash(MSG_LEAVE_SUCCESS, CATEGORY_SUCCESS)
    except Exception as e:
        current_app.logger.error(f"Error removing player {player_id}: {e}")
        flash(f"{MSG_LEAVE_FAILED}: {e}", CATEGORY_ERROR)
    return redirect(url_for(".index"))


@bp.route("/api/state")
def state():
    """Return the board view state for polling clients."""
    return jsonify(get_board().snapshot())
