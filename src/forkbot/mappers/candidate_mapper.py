from github.Repository import Repository

from forkbot.models.candidate import CandidateRepository


def map_candidate(repo: Repository) -> CandidateRepository:
    """
    PyGithub Repository → CandidateRepository
    """
    owner = repo.owner.login if repo.owner else repo.full_name.split("/", 1)[0]

    return CandidateRepository(
        # --------------------
        # Identity
        # --------------------
        full_name=repo.full_name,
        owner=owner,
        clone_url=repo.clone_url,
        html_url=repo.html_url,
        default_branch=repo.default_branch or "main",

        # --------------------
        # Signals
        # --------------------
        language=repo.language,
        description=repo.description,
        stargazers_count=repo.stargazers_count or 0,

        # --------------------
        # Activity
        # --------------------
        created_at=repo.created_at,
        pushed_at=repo.pushed_at,
    )
