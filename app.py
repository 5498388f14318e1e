import os
from dotenv import load_dotenv

# load .env before anything reads the environment
BASE_DIR = os.path.dirname(__file__)
load_dotenv(dotenv_path=os.path.join(BASE_DIR, '.env'))

import click
from flask import Flask, jsonify, request
from flask.cli import AppGroup
from werkzeug.exceptions import HTTPException

from ai_providers.base import MalformedOutput, NoContent, UpstreamCallFailed
from services import generator
from services.generator import InputInvalid
from services.planner import StudyPlanStore
from services.storage import SqlStorage
import services.coach as coach
import services.flashcards as fc
import services.quizzer as quizzer

RUNTIME_DIR = os.path.join(BASE_DIR, "runtime")

app = Flask(__name__)
app.secret_key = os.getenv('SECRET_KEY', 'dev')
app.config["STUDY_DB_PATH"] = os.getenv("STUDY_DB_PATH", os.path.join(RUNTIME_DIR, "study_tools.db"))
app.config["AI_PROVIDER"] = None


def _provider():
    prov = app.config.get("AI_PROVIDER")
    if prov is None:
        prov = generator.get_provider()
        app.config["AI_PROVIDER"] = prov
    return prov


def _handle(task: generator.Task):
    body = request.get_json(silent=True)
    try:
        text = generator.read_input(task, body)
    except InputInvalid as e:
        return jsonify(error=str(e)), 400

    try:
        result = generator.run(task, text, _provider())
    except MalformedOutput as e:
        app.logger.error("Failed to parse structured JSON response: %s", e)
        return jsonify(error=task.malformed), 500
    except NoContent as e:
        app.logger.error("%s API error: %s", task.label, e)
        return jsonify(error=task.no_content), 500
    except UpstreamCallFailed as e:
        app.logger.error("%s API error: %s", task.label, e)
        return jsonify(error=task.failed), 500
    return jsonify(result)


# ============== AI TOOLS ==============

@app.post('/api/flashcards')
def flashcards():
    return _handle(fc.TASK)


@app.post('/api/quiz')
def quiz():
    return _handle(quizzer.TASK)


@app.post('/api/study-buddy')
@app.post('/api/studybuddy')
def study_buddy():
    return _handle(coach.TASK)


@app.get('/api/health')
def health():
    return jsonify(status="ok", provider=_provider().name)


# ============== ERRORS ==============

@app.errorhandler(HTTPException)
def http_error(e):
    return jsonify(error=e.description), e.code


@app.errorhandler(Exception)
def internal_error(e):
    app.logger.exception("Unhandled error: %s", e)
    return jsonify(error="Internal server error"), 500


# ============== PLANNER CLI ==============

planner_cli = AppGroup("planner", help="Manage the local study plan (goals and subjects).")


def _open_store() -> StudyPlanStore:
    store = StudyPlanStore(SqlStorage(app.config["STUDY_DB_PATH"]))
    store.load()
    return store


def _report(store: StudyPlanStore) -> None:
    if store.error:
        click.echo(f"Error: {store.error}", err=True)


@planner_cli.command("show")
def planner_show():
    store = _open_store()
    _report(store)
    if store.plan is None:
        return
    done, total, percent = store.progress()
    click.echo(f"{done} out of {total} goals completed. ({percent:.0f}%)")
    click.echo("Active goals:")
    for g in store.active_goals():
        target = f" (Target: {g.target_date[:10]})" if g.target_date else ""
        click.echo(f"  [ ] {g.id}  {g.description}{target}")
    click.echo("Completed goals:")
    for g in store.completed_goals():
        click.echo(f"  [x] {g.id}  {g.description}")
    click.echo("Subjects: " + (", ".join(store.plan.subjects) or "-"))


@planner_cli.command("add-goal")
@click.argument("description")
@click.option("--target", default=None, help="Target date, YYYY-MM-DD.")
def planner_add_goal(description, target):
    store = _open_store()
    goal = store.add_goal(description, target)
    _report(store)
    if goal is not None:
        click.echo(goal.id)


@planner_cli.command("toggle-goal")
@click.argument("goal_id")
def planner_toggle_goal(goal_id):
    store = _open_store()
    store.toggle_goal(goal_id)
    _report(store)


@planner_cli.command("delete-goal")
@click.argument("goal_id")
def planner_delete_goal(goal_id):
    store = _open_store()
    store.delete_goal(goal_id)
    _report(store)


@planner_cli.command("add-subject")
@click.argument("name")
def planner_add_subject(name):
    store = _open_store()
    store.add_subject(name)
    _report(store)


@planner_cli.command("delete-subject")
@click.argument("name")
def planner_delete_subject(name):
    store = _open_store()
    store.delete_subject(name)
    _report(store)


app.cli.add_command(planner_cli)

if __name__ == '__main__':
    app.run(debug=True)
