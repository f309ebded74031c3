"""CLI interface for HirePath using Typer."""

import asyncio
from functools import wraps
from pathlib import Path
from typing import Annotated, AsyncIterator

import typer
from rich.console import Console
from rich.table import Table

from ..core.config.loader import load_config
from ..core.directory import CandidateFilter
from ..core.errors import HirePathError
from ..core.models.base import AuthContext
from ..core.models.enums import InterviewRequestStatus, InterviewStatus, UserRole
from ..core.orchestrator.workflow import HirePathWorkflow
from ..core.ranking import rank_band
from ..observability.logger import configure_from, get_logger

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="hirepath",
    help="HirePath - resume assessment, ranking and interview scheduling",
    add_completion=False,
)

CHUNK_SIZE = 256 * 1024


def _get_workflow() -> HirePathWorkflow:
    config = load_config()
    configure_from(config)
    return HirePathWorkflow.from_config(config)


def _candidate(user_id: str) -> AuthContext:
    return AuthContext(user_id=user_id, role=UserRole.CANDIDATE)


def _recruiter(user_id: str) -> AuthContext:
    return AuthContext(user_id=user_id, role=UserRole.RECRUITER)


def handle_errors(func):
    """Print domain errors in red and exit non-zero instead of dumping a traceback."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HirePathError as e:
            console.print(f"[red]! Error:[/red] {e}")
            raise typer.Exit(code=1)

    return wrapper


UserOption = Annotated[str, typer.Option("--user", "-u", help="Candidate account id")]
RecruiterOption = Annotated[str, typer.Option("--recruiter", "-r", help="Recruiter account id")]


@app.command()
def init_store():
    """Create the object store and blob directories."""
    console.print("[bold blue]Initializing storage...[/bold blue]")
    workflow = _get_workflow()
    console.print("[green]Object store ready at[/green] ", workflow.store.base_dir)
    console.print("[green]Blob store ready at[/green] ", workflow.blob_store.base_dir)


@app.command()
@handle_errors
def register(
    user: UserOption,
    name: Annotated[str, typer.Option("--name", "-n", help="Full name")] = "",
    email: Annotated[str | None, typer.Option("--email", "-e", help="Contact email")] = None,
):
    """Register a candidate and create an empty profile."""
    profile = _get_workflow().register_candidate(_candidate(user), full_name=name, email=email)
    console.print(f"[green]Candidate profile:[/green] {profile.id}")


@app.command()
@handle_errors
def upload_resume(
    user: UserOption,
    resume: Annotated[
        Path,
        typer.Option("--resume", "-f", help="Resume PDF", exists=True, file_okay=True, dir_okay=False),
    ],
):
    """Upload a resume PDF, then extract and parse it."""
    workflow = _get_workflow()
    content_type = "application/pdf" if resume.suffix.lower() == ".pdf" else "application/octet-stream"
    profile = asyncio.run(workflow.upload_resume(_candidate(user), resume.name, resume.read_bytes(), content_type))

    console.print("\n[green]> Resume processed[/green]")
    console.print(f"[bold]Name:[/bold] {profile.display_name or '-'}")
    console.print(f"[bold]Skills:[/bold] {', '.join(profile.skills) or '-'}")
    if profile.parsed_resume and profile.parsed_resume.missing_sections:
        console.print(f"[yellow]Sections not found:[/yellow] {', '.join(profile.parsed_resume.missing_sections)}")


@app.command()
@handle_errors
def chat(
    user: UserOption,
    answers: Annotated[
        Path | None,
        typer.Option("--answers", "-a", help="File with one answer per line (non-interactive)", exists=True),
    ] = None,
):
    """Run the skills verification chat, then assess and rank the candidate."""
    workflow = _get_workflow()
    auth = _candidate(user)
    scripted = [line for line in answers.read_text(encoding="utf-8").splitlines() if line.strip()] if answers else None

    async def run_chat():
        session = await workflow.start_chat(auth)
        shown = 0
        while True:
            for message in session.messages[shown:]:
                style = "cyan" if message.role == "interviewer" else "white"
                console.print(f"[{style}]{message.role}:[/{style}] {message.text}")
            shown = len(session.messages)
            if session.completed:
                return
            if scripted is not None:
                if not scripted:
                    console.print("[yellow]Ran out of scripted answers; chat saved unfinished[/yellow]")
                    return
                text = scripted.pop(0)
            else:
                text = typer.prompt("you")
            session = await workflow.answer(auth, text)

    asyncio.run(run_chat())
    _print_status(workflow, auth)


@app.command()
@handle_errors
def invite(
    recruiter: RecruiterOption,
    candidate_id: Annotated[str, typer.Argument(help="Candidate identifier")],
):
    """Invite a qualified candidate to interview."""
    request = asyncio.run(_get_workflow().invite_candidate(_recruiter(recruiter), candidate_id))
    console.print(f"[green]Interview request created:[/green] {request.id}")


@app.command()
def slots():
    """Show the interview slot catalog."""
    table = Table(title="Available Interview Slots")
    table.add_column("Date", style="cyan")
    table.add_column("Times")
    for day in _get_workflow().available_slots():
        table.add_row(day.date, ", ".join(day.slots))
    console.print(table)


@app.command()
@handle_errors
def schedule(
    user: UserOption,
    date: Annotated[str, typer.Option("--date", "-d", help="Slot date, e.g. 2025-05-15")],
    time: Annotated[str, typer.Option("--time", "-t", help="Slot time, e.g. '10:00 AM'")],
):
    """Book an interview slot from the outstanding invitation."""
    workflow = _get_workflow()
    auth = _candidate(user)
    request = workflow.interview_request(auth)
    if request is None:
        console.print("[yellow]No interview invitation found[/yellow]")
        raise typer.Exit(code=1)
    request = asyncio.run(workflow.schedule_interview(auth, request.id, date, time))
    console.print(f"[green]Interview scheduled:[/green] {request.selected_date} at {request.selected_time}")


async def _read_chunks(path: Path) -> AsyncIterator[bytes]:
    with open(path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            yield chunk
            await asyncio.sleep(0)


@app.command()
@handle_errors
def record(
    user: UserOption,
    video: Annotated[
        Path,
        typer.Option("--video", "-v", help="Recorded interview video", exists=True, dir_okay=False),
    ],
    answers: Annotated[
        Path | None,
        typer.Option("--answers", "-a", help="Transcript answers, one per line", exists=True),
    ] = None,
):
    """Upload an interview recording and complete the interview."""
    workflow = _get_workflow()
    transcript_answers = answers.read_text(encoding="utf-8").splitlines() if answers else []
    session = workflow.start_recording(_candidate(user), answers=transcript_answers)
    recording = asyncio.run(session.run(_read_chunks(video)))
    console.print(f"[green]Interview completed.[/green] Recording {recording.id} ({recording.size_bytes} bytes)")


@app.command()
@handle_errors
def candidates(
    recruiter: RecruiterOption,
    search: Annotated[str, typer.Option("--search", "-s", help="Name or skill substring")] = "",
    min_rank: Annotated[float, typer.Option("--min-rank", "-m", help="Minimum rank (0-100)")] = 0.0,
    skill: Annotated[list[str] | None, typer.Option("--skill", "-k", help="Required skill (repeatable)")] = None,
):
    """List candidates, filtered and sorted by rank."""
    criteria = CandidateFilter(search_term=search, min_rank=min_rank, skills=skill or [])
    results = _get_workflow().list_candidates(_recruiter(recruiter), criteria)
    if not results:
        console.print("[yellow]No candidates match these filters[/yellow]")
        return

    table = Table(title=f"Candidates ({len(results)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Rank", justify="right", style="green")
    table.add_column("Band")
    table.add_column("Interview")
    table.add_column("Skills")
    for c in results:
        table.add_row(
            c.id,
            c.display_name or "-",
            f"{c.rank:.1f}" if c.rank is not None else "-",
            rank_band(c.rank).value,
            InterviewStatus(c.interview_status).value,
            ", ".join(c.skills[:6]),
        )
    console.print(table)


@app.command()
@handle_errors
def feedback(
    recruiter: RecruiterOption,
    candidate_id: Annotated[str, typer.Argument(help="Candidate identifier")],
    rating: Annotated[int, typer.Option("--rating", help="Rating from 1 to 5")],
    text: Annotated[str, typer.Option("--text", "-t", help="Feedback text")],
):
    """Leave a review for a candidate (one per recruiter and candidate)."""
    review = _get_workflow().submit_feedback(_recruiter(recruiter), candidate_id, rating, text)
    console.print(f"[green]Feedback saved:[/green] {review.id}")


@app.command()
@handle_errors
def reviews(recruiter: RecruiterOption):
    """Show the reviews this recruiter has written."""
    entries = _get_workflow().my_reviews(_recruiter(recruiter))
    if not entries:
        console.print("[yellow]No reviews yet[/yellow]")
        return
    table = Table(title="My Reviews")
    table.add_column("Candidate", style="cyan")
    table.add_column("Rating", justify="right")
    table.add_column("Feedback")
    table.add_column("Date", style="dim")
    for entry in entries:
        table.add_row(
            entry.candidate_name,
            "*" * entry.feedback.rating,
            entry.feedback.feedback,
            entry.feedback.created_at.strftime("%Y-%m-%d"),
        )
    console.print(table)


@app.command()
@handle_errors
def dashboard(recruiter: RecruiterOption):
    """Recruiter dashboard counters."""
    stats = _get_workflow().dashboard_stats(_recruiter(recruiter))
    table = Table(title="Recruiter Dashboard")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total candidates", str(stats.total_candidates))
    table.add_row("Qualified candidates", str(stats.qualified_candidates))
    table.add_row("Reviews given", str(stats.reviews_given))
    table.add_row("Average rating", f"{stats.average_rating:.1f}" if stats.average_rating is not None else "-")
    for status_name, count in stats.interviews_by_status.items():
        table.add_row(f"Interviews: {status_name}", str(count))
    console.print(table)


def _print_status(workflow: HirePathWorkflow, auth: AuthContext) -> None:
    profile = workflow.store.find_candidate_by_user(auth.user_id)
    if profile is None:
        console.print(f"[yellow]No candidate profile for user:[/yellow] {auth.user_id}")
        raise typer.Exit(code=1)

    table = Table(title=f"Candidate {profile.display_name or profile.id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Rank", f"{profile.rank:.1f}" if profile.rank is not None else "-")
    table.add_row("Band", rank_band(profile.rank).value)
    table.add_row("Interview status", InterviewStatus(profile.interview_status).value)
    if profile.verified_skills:
        table.add_row(
            "Verified skills",
            ", ".join(f"{skill} ({score:.0%})" for skill, score in profile.verified_skills.items()),
        )
    if profile.skill_gaps:
        table.add_row("Skill gaps", "; ".join(profile.skill_gaps))
    request = workflow.store.latest_interview_request(profile.id)
    if request is not None:
        selected = f"{request.selected_date} {request.selected_time}" if request.selected_date else "not booked"
        table.add_row("Interview request", f"{request.id} ({InterviewRequestStatus(request.status).value}, {selected})")
    console.print(table)


@app.command()
@handle_errors
def status(user: UserOption):
    """Show a candidate's rank, assessment and interview status."""
    _print_status(_get_workflow(), _candidate(user))


if __name__ == "__main__":
    app()
