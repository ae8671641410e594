"""FastAPI dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from ..app import StudyApp


def get_study_app(request: Request) -> StudyApp:
    return request.app.state.study_app


StudyAppDep = Annotated[StudyApp, Depends(get_study_app)]
