from .machine import (
    consume_program_number,
    count_programs,
    count_programs_by_machine,
    count_setup_sheets,
    create_machine,
    delete_machine,
    get_machine,
    list_machine_programs,
    list_machines,
    update_machine,
)
from .program import (
    create_program,
    create_version,
    delete_program,
    get_program,
    get_program_detail,
    get_programs_by_ids,
    get_version,
    latest_version_number,
    list_all_programs,
    list_versions,
    query_programs,
    update_program,
)
from .setup_sheet import (
    add_media,
    count_setup_sheets_for_program,
    create_setup_sheet,
    delete_media,
    delete_setup_sheet,
    get_media,
    get_setup_sheet,
    get_setup_sheet_detail,
    list_setup_sheets_by_program,
    next_media_order,
    replace_fixtures,
    replace_media,
    replace_origin_offsets,
    replace_tools,
)
from .user import (
    authenticate_user,
    create_user,
    get_user_by_email,
    get_user_by_id,
    update_user_password,
)

__all__ = [
    # Machine functions
    "consume_program_number",
    "count_programs",
    "count_programs_by_machine",
    "count_setup_sheets",
    "create_machine",
    "delete_machine",
    "get_machine",
    "list_machine_programs",
    "list_machines",
    "update_machine",

    # Program functions
    "create_program",
    "create_version",
    "delete_program",
    "get_program",
    "get_program_detail",
    "get_programs_by_ids",
    "get_version",
    "latest_version_number",
    "list_all_programs",
    "list_versions",
    "query_programs",
    "update_program",

    # Setup sheet functions
    "add_media",
    "count_setup_sheets_for_program",
    "create_setup_sheet",
    "delete_media",
    "delete_setup_sheet",
    "get_media",
    "get_setup_sheet",
    "get_setup_sheet_detail",
    "list_setup_sheets_by_program",
    "next_media_order",
    "replace_fixtures",
    "replace_media",
    "replace_origin_offsets",
    "replace_tools",

    # User functions
    "authenticate_user",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "update_user_password",
]
