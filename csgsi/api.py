import logging
import time

import flask
from flask import g, request
from werkzeug.exceptions import ClientDisconnected

from csgsi.dispatcher import Dispatcher
from csgsi.queue_consumer import QueueClosedError
from csgsi.state_serialization import GameStateError, load_game_state, \
    parse_game_state

logger = logging.getLogger(__name__)


def start_timer() -> None:
    g.start_time = time.time()


def end_timer(response: flask.Response) -> flask.Response:
    response_time = "%.2fms" % (1000 * (time.time() - g.start_time))
    response.headers["X-Processing-Time"] = response_time
    return response


def empty_response(status: int) -> flask.Response:
    return flask.make_response("", status)


def log_rejected_body(error: Exception, body: bytes) -> None:
    logger.error("%s", error)
    logger.error("rejected game state: %s",
                 body.decode("utf-8", errors="replace"))


def game_state() -> flask.Response:
    """
    Receive one game state push, decode it and hand it to the dispatcher.

    Returns:
        An empty response: 200 once enqueued, 400 for a missing body, 500 for
        an unreadable, unparseable or invalid body
    """
    logger.debug("accepting game state")
    try:
        body = request.get_data(cache=False)
    except (ClientDisconnected, OSError) as e:
        logger.error("failed to read request body: %s", e)
        return empty_response(500)
    if not body:
        logger.warning("rejecting game state with no body")
        return empty_response(400)

    try:
        update = parse_game_state(load_game_state(body))
    except GameStateError as e:
        log_rejected_body(e, body)
        return empty_response(500)

    dispatcher: Dispatcher = flask.current_app.dispatcher
    try:
        dispatcher.send_update(update)
    except QueueClosedError:
        logger.critical("dispatcher stopped, update lost")
        raise
    return empty_response(200)


def create_app(dispatcher: Dispatcher) -> flask.Flask:
    app = flask.Flask(__name__)
    app.config["PROPAGATE_EXCEPTIONS"] = True
    app.dispatcher = dispatcher
    app.before_request(start_timer)
    app.after_request(end_timer)
    app.add_url_rule("/", view_func=game_state, methods=["POST"])
    return app
