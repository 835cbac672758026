"""CRUD operations package.

- catalog.py: faculties, departments and semesters
- module.py: modules and their curriculum assignments
- kuppi.py: tutorial videos
- user.py: platform users
- hierarchy.py: the faculty hierarchy document
- stats.py: dashboard counters
"""

from backoffice.app.db.crud.catalog import (
    list_faculties,
    create_faculty,
    list_departments,
    create_department,
    list_semesters,
    create_semester,
)

from backoffice.app.db.crud.module import (
    list_modules,
    get_module_by_id,
    create_module,
    update_module,
    delete_module,
    list_assignments,
    find_assignment,
    create_assignment,
    delete_assignment,
)

from backoffice.app.db.crud.kuppi import (
    kuppi_to_dict,
    list_kuppis,
    get_kuppi_by_id,
    create_kuppi,
    update_kuppi,
    delete_kuppi,
)

from backoffice.app.db.crud.user import (
    list_users,
    get_user_by_id,
    update_user,
    set_kuppi_approval,
    delete_user,
)

from backoffice.app.db.crud.hierarchy import (
    get_current_hierarchy,
    save_hierarchy,
)

from backoffice.app.db.crud.stats import (
    get_dashboard_stats,
    get_pending_kuppis,
    get_pending_users,
)

__all__ = [
    "list_faculties",
    "create_faculty",
    "list_departments",
    "create_department",
    "list_semesters",
    "create_semester",
    "list_modules",
    "get_module_by_id",
    "create_module",
    "update_module",
    "delete_module",
    "list_assignments",
    "find_assignment",
    "create_assignment",
    "delete_assignment",
    "kuppi_to_dict",
    "list_kuppis",
    "get_kuppi_by_id",
    "create_kuppi",
    "update_kuppi",
    "delete_kuppi",
    "list_users",
    "get_user_by_id",
    "update_user",
    "set_kuppi_approval",
    "delete_user",
    "get_current_hierarchy",
    "save_hierarchy",
    "get_dashboard_stats",
    "get_pending_kuppis",
    "get_pending_users",
]
