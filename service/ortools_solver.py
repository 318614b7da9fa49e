"""
OR-Tools CP-SAT based timetable solver.

Offline generation provider: builds the same room -> day -> slot shape the AI
model is asked for, but enforces every rule instead of relying on the prompt.
"""

from ortools.sat.python import cp_model
from fastapi.concurrency import run_in_threadpool
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
import logging

from models.schemas import ClassAssignment, ScheduleParameters
from service.exceptions import GenerationError
from service.editor import EXCLUSIVE_GRADE_PAIRS
from service.prompt_builder import expected_class_names, room_names, slot_names

logger = logging.getLogger(__name__)

Cell = Tuple[str, str, str]  # (room, day, slot)


class ORToolsTimetableSolver:
    """
    Constraint-based timetable builder using OR-Tools CP-SAT solver.

    Hard rules: every class exactly once, slot capacity, grade 1/2 and 3/4
    exclusion. Objective: fill earlier rooms first, then even out the days.
    """

    def __init__(self, time_limit_seconds: int = 30, random_seed: int = 42, num_workers: int = 1):
        """
        Initialize the solver.

        Args:
            time_limit_seconds: Maximum time allowed for solver
            random_seed: Seed for deterministic search
            num_workers: Number of search workers
        """
        self.time_limit_seconds = time_limit_seconds
        self.random_seed = random_seed
        self.num_workers = num_workers

        # Per-solve state
        self.model: Optional[cp_model.CpModel] = None
        self.params: Optional[ScheduleParameters] = None
        self.classes: List[ClassAssignment] = []
        self.cells: List[Cell] = []
        self.variables: Dict[Tuple[int, Cell], Any] = {}

    async def generate(self, params: ScheduleParameters) -> Dict[str, Any]:
        # A fresh solver per request; solve() keeps its model on the instance.
        solver = ORToolsTimetableSolver(
            time_limit_seconds=self.time_limit_seconds,
            random_seed=self.random_seed,
            num_workers=self.num_workers,
        )
        return await run_in_threadpool(solver.solve, params)

    def solve(self, params: ScheduleParameters) -> Dict[str, Any]:
        """
        Build a timetable for the given parameters.

        Returns:
            room -> day -> slot -> sorted class names, every cell present

        Raises:
            GenerationError: no feasible timetable, or none found in time
        """
        self.params = params
        self.model = cp_model.CpModel()
        self.classes = [ClassAssignment.from_name(n) for n in expected_class_names(params)]
        self.cells = [
            (room, day, slot)
            for room in room_names(params.number_of_rooms)
            for day in params.included_days
            for slot in slot_names(params.sessions_per_day)
        ]

        self._create_variables()
        self._add_hard_constraints()
        self._add_objective()

        solver = cp_model.CpSolver()
        solver.parameters.random_seed = self.random_seed
        solver.parameters.num_workers = self.num_workers
        solver.parameters.max_time_in_seconds = self.time_limit_seconds

        start_time = datetime.now()
        status = solver.Solve(self.model)
        solve_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Solver finished with {solver.StatusName(status)} in {solve_time:.2f}s")

        return self._extract_solution(solver, status)

    def _create_variables(self):
        """x[class_idx, cell] = 1 if the class is placed in that cell."""
        self.variables = {}
        for class_idx in range(len(self.classes)):
            for cell in self.cells:
                room, day, slot = cell
                self.variables[(class_idx, cell)] = self.model.NewBoolVar(
                    f'class_{class_idx}_{room}_{day}_{slot}'
                )

    def _add_hard_constraints(self):
        # 1. Every class scheduled exactly once
        for class_idx in range(len(self.classes)):
            self.model.AddExactlyOne(
                [self.variables[(class_idx, cell)] for cell in self.cells]
            )

        for cell in self.cells:
            # 2. Slot capacity
            self.model.Add(
                sum(self.variables[(class_idx, cell)] for class_idx in range(len(self.classes)))
                <= self.params.max_concurrent_classes
            )

            # 3. Exclusive grade pairs never share a cell
            for first, second in EXCLUSIVE_GRADE_PAIRS:
                first_present = self._grade_present(first, cell)
                second_present = self._grade_present(second, cell)
                if first_present is not None and second_present is not None:
                    self.model.Add(first_present + second_present <= 1)

    def _grade_present(self, grade: int, cell: Cell):
        """Bool var that is forced true whenever a class of this grade sits in the cell."""
        members = [i for i, c in enumerate(self.classes) if c.grade == grade]
        if not members:
            return None
        present = self.model.NewBoolVar(f'grade_{grade}_{"_".join(cell)}')
        for class_idx in members:
            self.model.AddImplication(self.variables[(class_idx, cell)], present)
        return present

    def _add_objective(self):
        """Earlier rooms first; among equally packed rooms, the flattest week."""
        total = len(self.classes)
        room_index = {room: i for i, room in enumerate(room_names(self.params.number_of_rooms))}

        room_cost = sum(
            room_index[cell[0]] * var for (class_idx, cell), var in self.variables.items()
        )

        day_loads = []
        for day in self.params.included_days:
            load = self.model.NewIntVar(0, total, f'load_{day}')
            self.model.Add(load == sum(
                var for (class_idx, cell), var in self.variables.items() if cell[1] == day
            ))
            day_loads.append(load)

        busiest = self.model.NewIntVar(0, total, 'busiest_day')
        quietest = self.model.NewIntVar(0, total, 'quietest_day')
        self.model.AddMaxEquality(busiest, day_loads)
        self.model.AddMinEquality(quietest, day_loads)

        # The spread never exceeds total, so room order always dominates.
        self.model.Minimize((total + 1) * room_cost + (busiest - quietest))

    def _extract_solution(self, solver: cp_model.CpSolver, status) -> Dict[str, Any]:
        if status == cp_model.INFEASIBLE:
            raise GenerationError(
                "No feasible timetable exists. Try adding rooms, days or time slots, "
                "or allowing more classes at once."
            )
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            raise GenerationError("Solver timeout - no timetable found within time limit")

        result: Dict[str, Any] = {}
        for room, day, slot in self.cells:
            result.setdefault(room, {}).setdefault(day, {})[slot] = []

        for (class_idx, cell), var in self.variables.items():
            if solver.Value(var) == 1:
                room, day, slot = cell
                result[room][day][slot].append(self.classes[class_idx].name)

        for days in result.values():
            for slots in days.values():
                for slot in slots:
                    slots[slot].sort()

        return result
