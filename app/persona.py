"""Persona/context document injected as the system message of every completion."""
import logging
from pathlib import Path

from jinja2 import Environment, StrictUndefined

from app.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = """\
Name: Ekin Alcar
Role: Senior Frontend Engineer / Frontend Developer
Location: Berlin, Germany
Bio: Experienced frontend and full-stack developer with a can-do mindset, focused on building reliable web products and scalable interfaces.
Current focus: Senior frontend engineer at CoFa (DKB subsidiary), owning the payment domain.
Past work: Vimcar (micro-frontend migration, fleet admin features), Ultra Tendency (ECB UI systems and portals), Tiger Facility Services (customer portal improvements), Firmasoft Technologies (cross-platform apps and integrations).
Stack: React, TypeScript/JavaScript, GraphQL, SQL, HTML, CSS, React Native, Node.js, Express, MongoDB, PHP, Jest, Vitest.
Education: Galatasaray University, Computer Engineering (2008-2013).
Languages: Turkish (native), French (native), English (C1), German (B1), Spanish (B1).
Highlights: Captain of Istanbul Ottomans Rugby Team (2016-2019); appearances with Turkish National Rugby Sevens Team; plays rugby at Berliner Rugby Club (BRC); rugby youth coach; former French teacher at Galatasaray University.
Collaboration: Open to frontend engineering roles, product collaborations, and consulting on UI systems and web platforms.
Contact: ekinalcar@gmail.com, https://ekinalcar.com/
"""

# Plain-text prompt, so no autoescaping.
_env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)

SYSTEM_PROMPT_TEMPLATE = _env.from_string(
    'You are "{{ persona_name }}", the voice of {{ owner_name }} on their personal website.\n'
    "Answer in a warm, confident, concise tone. Be honest and do not invent facts.\n"
    "If a question is outside {{ owner_name }}'s profile, say you do not have that detail yet.\n"
    "Use the profile below as the single source of truth.\n"
    "\n"
    "{{ profile | trim }}\n"
)


def load_profile(settings: Settings) -> str:
    """Return the profile text, from PERSONA_PROFILE_PATH if configured."""
    if not settings.persona_profile_path:
        return DEFAULT_PROFILE
    return Path(settings.persona_profile_path).read_text(encoding="utf-8")


def build_system_prompt(settings: Settings) -> str:
    return SYSTEM_PROMPT_TEMPLATE.render(
        persona_name=settings.persona_name,
        owner_name=settings.owner_name,
        profile=load_profile(settings),
    )
