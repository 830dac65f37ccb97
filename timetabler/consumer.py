import json
import logging
import pika
import time
from dataclasses import fields, replace
from typing import Dict, Any, List, Optional

from config.settings import get_optimizer_config, get_rabbitmq_config
from timetabler.exceptions import ConfigurationError, TimetablerError
from timetabler.models.academic_period import AcademicPeriods, DEFAULT_LUNCH_PERIOD, DEFAULT_PERIODS, Period
from timetabler.models.batch import Batch
from timetabler.models.course import Course
from timetabler.models.department import Department
from timetabler.models.faculty import Faculty
from timetabler.models.optimization_result import OptimizationResult
from timetabler.models.optimizer_config import OptimizerConfig
from timetabler.models.optimizer_input import OptimizerInput
from timetabler.models.regulation import Regulation
from timetabler.models.room import Room
from timetabler.models.semester import Semester
from timetabler.services.optimizer import optimize_timetable

logger = logging.getLogger(__name__)


def _parse_period(value: Any) -> Period:
    if isinstance(value, dict):
        return str(value["start"]), str(value["end"])
    if isinstance(value, str):
        start, end = value.split("-")
        return start.strip(), end.strip()
    start, end = value
    return str(start), str(end)


def parse_optimizer_input(data: Dict[str, Any]) -> OptimizerInput:
    """
    Converts JSON data received from RabbitMQ into an OptimizerInput.

    Args:
        data: Dictionary with the snapshot of the academic data

    Expected format:
    {
        "target_semester": 1,
        "periods": [["09:00", "10:00"], "10:00-11:00", {"start": "11:00", "end": "12:00"}, ...],
        "lunch_period": ["12:00", "13:00"],
        "rooms": [{"id": "r1", "name": "LH-101", "capacity": 60, "type": "Classroom"}, ...],
        "departments": [{
            "id": "d1", "name": "Computer Science", "code": "CSE",
            "regulations": [{"id": "R24", "name": "R2024", "year": 2024, "semesters": [
                {"id": "s1", "semester_number": 1, "courses": [
                    {"id": "c1", "code": "CSE101", "name": "Programming", "weekly_hours": 3}, ...]}]}],
            "batches": [{"id": "b1", "name": "CSE-2024-A", "regulation_id": "R24", "student_count": 50}],
            "faculty": [{"id": "f1", "name": "Dr. Alice Smith", "max_load": 18,
                         "eligible_course_ids": ["c1"], "preferences": ["Morning slots"]}]
        }, ...]
    }

    Returns:
        Parsed OptimizerInput
    """
    departments = []
    for dept in data.get("departments", []):
        regulations = []
        for reg in dept.get("regulations", []):
            semesters = []
            for sem in reg.get("semesters", []):
                courses = [
                    Course(
                        id=str(course["id"]),
                        code=course.get("code", ""),
                        name=course.get("name", ""),
                        weekly_hours=int(course.get("weekly_hours", 0)),
                        department_id=str(dept["id"]),
                    )
                    for course in sem.get("courses", [])
                ]
                semesters.append(Semester(
                    id=str(sem.get("id", sem["semester_number"])),
                    semester_number=int(sem["semester_number"]),
                    courses=courses,
                ))
            regulations.append(Regulation(
                id=str(reg["id"]),
                name=reg.get("name", ""),
                year=int(reg.get("year", 0)),
                semesters=semesters,
            ))

        batches = [
            Batch(
                id=str(batch["id"]),
                name=batch.get("name", str(batch["id"])),
                regulation_id=str(batch["regulation_id"]),
                student_count=int(batch.get("student_count", 0)),
            )
            for batch in dept.get("batches", [])
        ]

        faculty = [
            Faculty(
                id=str(member["id"]),
                name=member.get("name", str(member["id"])),
                eligible_course_ids={str(course_id) for course_id in member.get("eligible_course_ids", [])},
                max_load=int(member.get("max_load", 18)),
                preferences=list(member.get("preferences", [])),
            )
            for member in dept.get("faculty", [])
        ]

        departments.append(Department(
            id=str(dept["id"]),
            name=dept.get("name", ""),
            code=dept.get("code", ""),
            regulations=regulations,
            batches=batches,
            faculty=faculty,
        ))

    rooms = [
        Room(
            id=str(room["id"]),
            name=room.get("name", str(room["id"])),
            capacity=int(room.get("capacity", 0)),
            type=room.get("type", "Classroom"),
            building=room.get("building"),
        )
        for room in data.get("rooms", [])
    ]

    periods = [_parse_period(p) for p in data.get("periods", DEFAULT_PERIODS)]
    lunch = data.get("lunch_period", DEFAULT_LUNCH_PERIOD)

    return OptimizerInput(
        departments=departments,
        rooms=rooms,
        target_semester=int(data["target_semester"]),
        periods=AcademicPeriods(
            periods=periods,
            lunch_period=_parse_period(lunch) if lunch else None,
        ),
    )


def parse_optimizer_config(overrides: Optional[Dict[str, Any]]) -> OptimizerConfig:
    """Environment settings with the request's known overrides applied"""
    config = get_optimizer_config()
    if not overrides:
        return config
    if not isinstance(overrides, dict):
        raise ConfigurationError(
            "Optimizer settings must be an object",
            {"settings": overrides},
        )

    known = {f.name for f in fields(OptimizerConfig)}
    unknown = set(overrides) - known
    if unknown:
        logger.warning(f"Ignoring unknown optimizer settings: {sorted(unknown)}")
    return replace(config, **{k: v for k, v in overrides.items() if k in known}).validate()


def format_result(result: OptimizationResult) -> Dict[str, Any]:
    """Converts an OptimizationResult to a JSON-serializable dictionary"""
    timetable = {}
    for day, slots in result.timetable.items():
        timetable[day] = {}
        for slot, assignments in slots.items():
            timetable[day][slot] = [
                {
                    "session_id": a.session.id,
                    "course": {"id": a.session.course.id, "code": a.session.course.code,
                               "name": a.session.course.name},
                    "batch": {"id": a.session.batch.id, "name": a.session.batch.name},
                    "department_id": a.session.department_id,
                    "faculty_id": a.faculty_id,
                    "room_id": a.room_id,
                }
                for a in assignments
            ]

    return {
        "id": result.id,
        "name": result.name,
        "score": result.score,
        "timetable": timetable,
        "conflicts": [
            {
                "kind": c.kind.value,
                "day": c.day,
                "slot": c.slot,
                "message": c.message,
                "entity_ids": list(c.entity_ids),
                "severity": c.severity.value,
            }
            for c in result.conflicts
        ],
        "metrics": {
            "clustering_score": result.metrics.clustering_score,
            "distribution_score": result.metrics.distribution_score,
            "conflict_count": result.metrics.conflict_count,
            "utilization_rate": result.metrics.utilization_rate,
            "faculty_balance": result.metrics.faculty_balance,
            "student_gaps": result.metrics.student_gaps,
        },
        "needs_review": result.needs_review,
        "created_at": result.created_at.isoformat(),
    }


def process_optimize_timetable(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Processes timetable optimization request.

    Args:
        data: Academic data snapshot, optionally with a "settings" object
              overriding optimizer settings

    Returns:
        Dictionary with optimization results
    """
    try:
        logger.info("Starting timetable optimization...")

        optimizer_input = parse_optimizer_input(data)
        config = parse_optimizer_config(data.get("settings"))

        logger.info(f"Data parsed: {len(optimizer_input.departments)} departments, "
                    f"{len(optimizer_input.rooms)} rooms, "
                    f"{len(optimizer_input.faculty)} faculty, "
                    f"semester {optimizer_input.target_semester}")

        last_logged: List[int] = [-10]

        def log_progress(progress: float):
            if progress - last_logged[0] >= 10 or progress >= 100:
                logger.info(f"Optimization progress: {progress:.0f}%")
                last_logged[0] = int(progress)

        results = optimize_timetable(optimizer_input, config, progress_callback=log_progress)

        best = results[0] if results else None
        logger.info(f"Optimization completed. Best score: {best.score if best else 'n/a'}")

        return {
            "status": "success",
            "message": "Timetable optimized successfully",
            "data": {
                "results": [format_result(result) for result in results],
            },
        }

    except TimetablerError as e:
        logger.warning(f"Optimization rejected: {e.message}")
        return {
            "status": "error",
            "message": e.message,
            "details": e.details,
        }

    except (KeyError, ValueError, TypeError) as e:
        logger.error(f"Invalid optimization request: {e}", exc_info=True)
        return {
            "status": "error",
            "message": f"Invalid optimization request: {str(e)}",
        }

    except Exception as e:
        logger.error(f"Error optimizing timetable: {e}", exc_info=True)
        return {
            "status": "error",
            "message": f"Error optimizing timetable: {str(e)}",
        }


def _reply(ch, properties, result: Dict[str, Any]):
    if properties.reply_to:
        ch.basic_publish(
            exchange="",
            routing_key=properties.reply_to,
            properties=pika.BasicProperties(correlation_id=properties.correlation_id),
            body=json.dumps(result),
        )


def callback(ch, method, properties, body):
    """Message callback - processes the request and always acknowledges it"""
    correlation_id = properties.correlation_id

    try:
        logger.info(f"Received message: {correlation_id}")
        message = json.loads(body)
        command = message.get("pattern")

        if command == "test_connection":
            _reply(ch, properties, {"status": "success", "message": "Connection established"})

        elif command == "optimize_timetable":
            logger.info("Processing optimize_timetable request")
            result = process_optimize_timetable(message.get("data", {}))
            _reply(ch, properties, result)
            logger.info(f"Response sent for correlation_id: {correlation_id}")

        else:
            _reply(ch, properties, {"status": "error", "message": f"Unknown command: {command}"})

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in message: {e}")

    except Exception as e:
        logger.error(f"Unexpected error in callback: {e}", exc_info=True)

    finally:
        try:
            ch.basic_ack(delivery_tag=method.delivery_tag)
        except Exception as e:
            logger.warning(f"Error acknowledging message: {e}")


def create_connection_and_channel(rabbitmq_config):
    """Create RabbitMQ connection and channel with proper configuration"""
    connection_params = pika.ConnectionParameters(
        host=rabbitmq_config["host"],
        port=rabbitmq_config["port"],
        virtual_host=rabbitmq_config["vhost"],
        credentials=pika.PlainCredentials(
            username=rabbitmq_config["username"], password=rabbitmq_config["password"]
        ),
        heartbeat=rabbitmq_config["heartbeat"],
        blocked_connection_timeout=300,
        socket_timeout=10,
        connection_attempts=rabbitmq_config["connection_attempts"],
        retry_delay=rabbitmq_config["retry_delay"],
    )

    connection = pika.BlockingConnection(connection_params)
    channel = connection.channel()

    queue_name = rabbitmq_config["queue_name"]
    channel.queue_declare(queue=queue_name, durable=True)
    # one optimization at a time, they are CPU bound
    channel.basic_qos(prefetch_count=1)

    return connection, channel, queue_name


def start_consumer():
    """Start the RabbitMQ consumer, reconnecting with backoff"""
    rabbitmq_config = get_rabbitmq_config()
    max_reconnect_attempts = 10
    reconnect_delay = 5
    current_attempt = 0

    while current_attempt < max_reconnect_attempts:
        connection = None
        channel = None

        try:
            logger.info(
                f"Starting consumer (attempt {current_attempt + 1}/{max_reconnect_attempts})"
            )

            connection, channel, queue_name = create_connection_and_channel(
                rabbitmq_config
            )

            current_attempt = 0

            channel.basic_consume(queue=queue_name, on_message_callback=callback)

            logger.info(f"Consumer started, listening on queue: {queue_name}")
            channel.start_consuming()

        except pika.exceptions.StreamLostError as e:
            logger.error(
                f"Connection lost: {e}. Attempt {current_attempt + 1}/{max_reconnect_attempts}"
            )
            current_attempt += 1

        except pika.exceptions.AMQPConnectionError as e:
            logger.error(
                f"AMQP Connection error: {e}. Attempt {current_attempt + 1}/{max_reconnect_attempts}"
            )
            current_attempt += 1

        except KeyboardInterrupt:
            logger.info("Shutdown signal received, stopping consumer...")
            return

        except Exception as e:
            logger.error(
                f"Unexpected error: {e}. Attempt {current_attempt + 1}/{max_reconnect_attempts}",
                exc_info=True,
            )
            current_attempt += 1

        finally:
            try:
                if channel and not channel.is_closed:
                    channel.stop_consuming()
                    channel.close()
            except Exception as e:
                logger.warning(f"Error closing channel: {e}")

            try:
                if connection and not connection.is_closed:
                    connection.close()
            except Exception as e:
                logger.warning(f"Error closing connection: {e}")

        if current_attempt < max_reconnect_attempts:
            logger.info(f"Reconnecting in {reconnect_delay} seconds...")
            time.sleep(reconnect_delay)
            reconnect_delay = min(reconnect_delay * 1.5, 60)

    logger.error(
        f"Max reconnection attempts ({max_reconnect_attempts}) reached. Exiting."
    )


if __name__ == "__main__":
    start_consumer()
