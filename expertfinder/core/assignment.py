from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..providers.base import ProjectService
from .controller import DiscoveryViewController
from .errors import ApiError, AssignmentError, NoActiveProject

logger = logging.getLogger(__name__)


class AssignmentOutcome(str, Enum):
    ASSIGNED = "assigned"
    ALREADY_ENGAGED = "already_engaged"


class AssignmentCoordinator:
    """
    "Hire for project" from the open profile panel.

    The professional is hidden from discovery before the call goes out and restored if it
    fails. A successful call closes the panel and asks the project team listing for the
    authoritative membership. Nothing here retries on its own.
    """

    def __init__(self, projects: ProjectService, controller: DiscoveryViewController):
        self.projects = projects
        self.controller = controller

    async def assign(self, project_id: Optional[str], professional_id: str, role: Optional[str] = None) -> AssignmentOutcome:
        if not project_id:
            raise NoActiveProject()

        ctl = self.controller
        if str(project_id) != str(ctl.project_id):
            raise AssignmentError(
                f"project {project_id} is not the project being staffed ({ctl.project_id})",
                professional_id=str(professional_id),
            )

        pid = str(professional_id)
        exclusions = ctl.exclusions
        if role is None:
            record = ctl.find(pid)
            role = record.role if record is not None else None

        if not exclusions.add_optimistic(pid):
            logger.info("professional %s is already engaged with project %s", pid, project_id)
            return AssignmentOutcome.ALREADY_ENGAGED
        ctl.exclusions_changed()

        try:
            await self.projects.assign_professional(str(project_id), pid, role)
        except ApiError as e:
            exclusions.rollback(pid)
            if ctl.exclusions is exclusions:
                ctl.exclusions_changed()
            logger.error("assigning %s to project %s failed: %s", pid, project_id, e)
            raise AssignmentError("Failed to assign professional.", professional_id=pid) from e

        exclusions.settle(pid)
        if ctl.exclusions is not exclusions:
            # project switched while the call was out; the new project's set is not ours to touch
            return AssignmentOutcome.ASSIGNED

        logger.info("assigned %s to project %s as %s", pid, project_id, role)
        ctl.close_profile_for(pid)
        await ctl.refresh_team()
        return AssignmentOutcome.ASSIGNED
