"""Static end-user guide.

The guide is hand-written content titled with the project name; it does not
look at the source tree beyond that.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

# (heading, [(subheading, [bullet, ...]), ...])
SECTIONS = (
    (
        "Overview",
        [
            (
                "System Overview",
                [
                    "A web application for managing projects, participants and their progress",
                    "Accessible from any modern browser, no installation required",
                ],
            ),
            (
                "Key Features",
                [
                    "Project Management",
                    "User Registration",
                    "Progress Tracking",
                    "Reporting and Analytics",
                    "Communication Tools",
                    "Document Management",
                ],
            ),
        ],
    ),
    (
        "Getting Started",
        [
            (
                "System Requirements",
                [
                    "Chrome 90+, Firefox 88+, Safari 14+ or Edge 90+",
                    "A stable internet connection",
                    "Minimum screen resolution of 1024x768",
                ],
            ),
            (
                "First Login",
                [
                    "Navigate to the login page",
                    "Enter your email address and assigned password",
                    "Change your password if prompted",
                    "Complete your profile information",
                ],
            ),
            (
                "Dashboard",
                [
                    "Welcome section with quick statistics",
                    "Main navigation menu for every module",
                    "Quick actions for common tasks",
                    "Notifications and recent activity",
                ],
            ),
        ],
    ),
    (
        "Features",
        [
            (
                "Projects",
                [
                    "Create a project from the Projects page with **New Project**",
                    "Invite participants and assign roles",
                    "Track milestones and deadlines on the project timeline",
                ],
            ),
            (
                "Reports",
                [
                    "Generate progress and participation reports",
                    "Export reports as PDF or CSV",
                    "Schedule recurring reports by email",
                ],
            ),
            (
                "Documents",
                [
                    "Upload files to a project or to your profile",
                    "Share documents with selected users",
                    "Previous versions are kept for every document",
                ],
            ),
        ],
    ),
    (
        "User Roles",
        [
            ("Administrator", ["Manages users, roles and system settings", "Sees every project and report"]),
            ("Coordinator", ["Creates and manages projects", "Reviews participant progress"]),
            ("Participant", ["Joins projects and logs activity", "Uploads documents and reflections"]),
        ],
    ),
    (
        "Navigation",
        [
            (
                "Main Menu",
                [
                    "**Dashboard**: overview and quick actions",
                    "**Projects**: browse and manage projects",
                    "**Reports**: analytics and exports",
                    "**Profile**: personal settings",
                ],
            ),
            ("Search", ["Use the search bar to find projects, users and documents", "Filter results by type and date"]),
        ],
    ),
    (
        "Common Tasks",
        [
            ("Reset your password", ["Click **Forgot password** on the login page", "Follow the link sent by email"]),
            ("Join a project", ["Open the project page", "Click **Join** and confirm"]),
            ("Export a report", ["Open the report", "Choose **Export** and pick a format"]),
        ],
    ),
    (
        "Troubleshooting",
        [
            ("Cannot log in", ["Check that Caps Lock is off", "Reset your password", "Contact an administrator if the account is locked"]),
            ("Page loads slowly", ["Refresh the page", "Clear the browser cache", "Try another supported browser"]),
            ("Upload fails", ["Check the file size limit shown on the upload form", "Make sure the file type is allowed"]),
        ],
    ),
    (
        "FAQ",
        [
            ("Is my data backed up?", ["Yes, backups are taken daily"]),
            ("Can I use the system on a phone?", ["Yes, every page adapts to small screens"]),
            ("Who do I contact for help?", ["Your coordinator, or the support address in the page footer"]),
        ],
    ),
)

KEYBOARD_SHORTCUTS = (
    ("/", "Focus the search bar"),
    ("g d", "Go to the dashboard"),
    ("g p", "Go to projects"),
    ("g r", "Go to reports"),
    ("n", "Create a new item on the current page"),
    ("?", "Show all shortcuts"),
    ("Esc", "Close the open dialog"),
)

GLOSSARY = (
    ("Coordinator", "A user who creates projects and reviews participant progress"),
    ("Dashboard", "The landing page shown after login"),
    ("Milestone", "A dated goal within a project"),
    ("Participant", "A user taking part in one or more projects"),
    ("Project", "A unit of work with participants, milestones and documents"),
    ("Report", "A generated summary of activity, exportable as PDF or CSV"),
)


def build_user_guide(
    project_name: str, detailed: bool = False, updated: Optional[date] = None
) -> str:
    """Markdown user guide; ``detailed`` adds keyboard shortcuts and a glossary."""
    updated = updated or date.today()
    lines = [
        f"# {project_name} - User Guide",
        "",
        f"**Last Updated**: {updated.strftime('%B %d, %Y')}",
        "",
        "## Table of Contents",
        "",
    ]
    headings = [heading for heading, _ in SECTIONS]
    if detailed:
        headings += ["Keyboard Shortcuts", "Glossary"]
    lines.extend(f"- {heading}" for heading in headings)
    lines.append("")

    for heading, subsections in SECTIONS:
        lines.extend([f"## {heading}", ""])
        for subheading, bullets in subsections:
            lines.extend([f"### {subheading}", ""])
            lines.extend(f"- {bullet}" for bullet in bullets)
            lines.append("")

    if detailed:
        lines.extend(["## Keyboard Shortcuts", "", "| Shortcut | Action |", "|----------|--------|"])
        lines.extend(f"| `{key}` | {action} |" for key, action in KEYBOARD_SHORTCUTS)
        lines.extend(["", "## Glossary", ""])
        lines.extend(f"- **{term}**: {meaning}" for term, meaning in GLOSSARY)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
