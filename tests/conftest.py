import random

import pytest

from timetabler.models.academic_period import AcademicPeriods
from timetabler.models.assignment import Assignment
from timetabler.models.batch import Batch
from timetabler.models.course import Course
from timetabler.models.department import Department
from timetabler.models.faculty import Faculty
from timetabler.models.optimizer_config import OptimizerConfig
from timetabler.models.optimizer_input import OptimizerInput
from timetabler.models.regulation import Regulation
from timetabler.models.room import Room
from timetabler.models.semester import Semester
from timetabler.utils.placement import PlacementContext
from timetabler.utils.sessions import materialize_sessions


@pytest.fixture()
def sample_input():
    """Two departments; CSE has two batches in semester 1 and one batch with a dangling regulation"""
    cse_sem1 = Semester(id="cse-r24-s1", semester_number=1, courses=[
        Course(id="c1", code="CSE101", name="Programming Fundamentals", weekly_hours=3),
        Course(id="c2", code="CSE102", name="Data Structures", weekly_hours=2),
    ])
    cse_sem2 = Semester(id="cse-r24-s2", semester_number=2, courses=[
        Course(id="c3", code="CSE201", name="Operating Systems", weekly_hours=4),
    ])
    cse = Department(
        id="cse",
        name="Computer Science",
        code="CSE",
        regulations=[Regulation(id="R24", name="R2024", year=2024, semesters=[cse_sem1, cse_sem2])],
        batches=[
            Batch(id="b1", name="CSE-2024-A", regulation_id="R24", student_count=50),
            Batch(id="b2", name="CSE-2024-B", regulation_id="R24", student_count=45),
            Batch(id="b3", name="CSE-2020-A", regulation_id="R20", student_count=30),
        ],
        faculty=[
            Faculty(id="f1", name="Dr. Alice Smith", eligible_course_ids={"c1"}, max_load=18),
            Faculty(id="f2", name="Prof. Bob Johnson", eligible_course_ids={"c1", "c2"}, max_load=16,
                    preferences=["Morning slots"]),
            Faculty(id="f3", name="Dr. David Brown", eligible_course_ids=set(), max_load=15),
        ],
    )
    math = Department(
        id="math",
        name="Mathematics",
        code="MATH",
        regulations=[Regulation(id="M24", name="M2024", year=2024, semesters=[
            Semester(id="m24-s1", semester_number=1, courses=[
                Course(id="m1", code="MATH101", name="Calculus I", weekly_hours=2),
            ]),
        ])],
        batches=[Batch(id="mb1", name="MATH-2024", regulation_id="M24", student_count=35)],
        faculty=[Faculty(id="f4", name="Dr. Carol Wilson", eligible_course_ids={"m1"}, max_load=20)],
    )
    rooms = [
        Room(id="r1", name="LH-101", capacity=60),
        Room(id="r2", name="LH-102", capacity=55),
        Room(id="r3", name="Lab-1", capacity=30, type="Lab"),
    ]
    return OptimizerInput(departments=[cse, math], rooms=rooms, target_semester=1)


@pytest.fixture()
def make_input():
    """Factory for one department, one batch and n courses taught by a single faculty member"""

    def _make(course_hours=(2,), student_count=30, room_capacity=40, periods=None,
              max_load=18, room_count=1):
        courses = [
            Course(id=f"c{i + 1}", code=f"CRS{i + 1}", name=f"Course {i + 1}", weekly_hours=hours)
            for i, hours in enumerate(course_hours)
        ]
        department = Department(
            id="d1",
            name="Computer Science",
            regulations=[Regulation(id="R1", name="R2024", year=2024, semesters=[
                Semester(id="s1", semester_number=1, courses=courses),
            ])],
            batches=[Batch(id="b1", name="CSE-A", regulation_id="R1", student_count=student_count)],
            faculty=[Faculty(id="f1", name="Dr. Solo", eligible_course_ids={c.id for c in courses},
                             max_load=max_load)],
        )
        rooms = [Room(id=f"r{i + 1}", name=f"Room {i + 1}", capacity=room_capacity) for i in range(room_count)]
        return OptimizerInput(
            departments=[department],
            rooms=rooms,
            target_semester=1,
            periods=periods or AcademicPeriods(),
        )

    return _make


@pytest.fixture()
def sessions(sample_input):
    return materialize_sessions(sample_input)


@pytest.fixture()
def context(sample_input):
    return PlacementContext(sample_input)


@pytest.fixture()
def fast_config():
    return OptimizerConfig(
        population_size=12,
        generations=8,
        runs=2,
        elite_count=2,
        tournament_size=3,
        random_seed=7,
    )


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def place():
    """Builds an assignment for a session"""

    def _place(session, day="Monday", slot=0, faculty_id="f1", room_id="r1"):
        return Assignment(session=session, day=day, slot=slot, faculty_id=faculty_id, room_id=room_id)

    return _place
