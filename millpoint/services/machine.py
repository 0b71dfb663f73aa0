"""机床业务逻辑

机床的增删改查、状态切换与下一个自动编号预览。
删除前检查引用：仍有程序（或装夹单）引用的机床不能删除。
"""

import logging
from typing import List, Optional

from .. import crud, schemas
from ..core.numbering import current_counter, format_program_number
from ..database.connection import Database
from ..errors import ConflictError, NotFoundError
from ..models import User

logger = logging.getLogger(__name__)


class MachineService:
    def __init__(self, database: Database):
        self.database = database

    def list_machines(self, type: Optional[str] = None, status: Optional[str] = None,
                      search: Optional[str] = None) -> List[schemas.MachineRead]:
        with self.database.transaction() as db:
            machines = crud.list_machines(db, type=type, status=status, search=search)
            counts = crud.count_programs_by_machine(db, [m.id for m in machines])
            return [
                schemas.MachineRead.model_validate(m).model_copy(update={"program_count": counts.get(m.id, 0)})
                for m in machines
            ]

    def get_machine(self, machine_id: str) -> schemas.MachineDetail:
        with self.database.transaction() as db:
            machine = self._require(db, machine_id)
            programs = crud.list_machine_programs(db, machine_id)
            detail = schemas.MachineDetail.model_validate(machine)
            return detail.model_copy(update={
                "programs": [schemas.MachineProgramSummary.model_validate(p) for p in programs],
                "program_count": len(programs),
            })

    def create_machine(self, data: schemas.MachineCreate, actor: User) -> schemas.MachineRead:
        with self.database.transaction() as db:
            machine = crud.create_machine(db, data.model_dump(mode="json"))
            result = schemas.MachineRead.model_validate(machine)
        logger.info("Machine %s (%s) created by %s", result.id, result.name, actor.email)
        return result

    def update_machine(self, machine_id: str, data: schemas.MachineUpdate, actor: User) -> schemas.MachineRead:
        with self.database.transaction() as db:
            machine = self._require(db, machine_id)
            crud.update_machine(db, machine, data.model_dump(mode="json", exclude_unset=True))
            result = schemas.MachineRead.model_validate(machine).model_copy(
                update={"program_count": crud.count_programs(db, machine_id)}
            )
        logger.info("Machine %s updated by %s", machine_id, actor.email)
        return result

    def update_status(self, machine_id: str, status: schemas.MachineStatus, actor: User) -> schemas.MachineRead:
        with self.database.transaction() as db:
            machine = self._require(db, machine_id)
            crud.update_machine(db, machine, {"status": status.value})
            result = schemas.MachineRead.model_validate(machine).model_copy(
                update={"program_count": crud.count_programs(db, machine_id)}
            )
        logger.info("Machine %s status -> %s by %s", machine_id, status.value, actor.email)
        return result

    def delete_machine(self, machine_id: str, actor: User) -> None:
        with self.database.transaction() as db:
            machine = self._require(db, machine_id)
            program_count = crud.count_programs(db, machine_id)
            if program_count > 0:
                raise ConflictError(f"Cannot delete machine with {program_count} associated programs")
            sheet_count = crud.count_setup_sheets(db, machine_id)
            if sheet_count > 0:
                raise ConflictError(f"Cannot delete machine with {sheet_count} associated setup sheets")
            crud.delete_machine(db, machine)
        logger.info("Machine %s deleted by %s", machine_id, actor.email)

    def next_program_number(self, machine_id: str) -> schemas.NextProgramNumber:
        """预览下一个自动编号，不消耗计数器"""
        with self.database.transaction() as db:
            machine = self._require(db, machine_id)
            value = current_counter(machine.next_program_number)
        return schemas.NextProgramNumber(next=value, formatted=format_program_number(value))

    @staticmethod
    def _require(db, machine_id: str):
        machine = crud.get_machine(db, machine_id)
        if machine is None:
            raise NotFoundError("Machine not found")
        return machine
