from fastapi import APIRouter

from . import (
    departments,
    faculties,
    hierarchy,
    kuppis,
    module_assignments,
    modules,
    semesters,
    stats,
    users,
)

router = APIRouter(prefix="/api")

router.include_router(faculties.router, prefix="/faculties", tags=["faculties"])
router.include_router(departments.router, prefix="/departments", tags=["departments"])
router.include_router(semesters.router, prefix="/semesters", tags=["semesters"])
router.include_router(modules.router, prefix="/modules", tags=["modules"])
router.include_router(module_assignments.router, prefix="/module-assignments", tags=["module-assignments"])
router.include_router(kuppis.router, prefix="/kuppis", tags=["kuppis"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(hierarchy.router, prefix="/hierarchy", tags=["hierarchy"])
router.include_router(stats.router, prefix="/stats", tags=["stats"])
