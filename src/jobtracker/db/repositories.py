from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from jobtracker.config import get_settings
from jobtracker.db.base import as_utc, new_id, utcnow
from jobtracker.db.models import Activity, Application, Company, Job, User
from jobtracker.db.session import SessionLocal
from jobtracker.errors import (
    DependencyConflictError,
    DuplicateKeyError,
    NotFoundError,
    PersistenceError,
    TrackerError,
    ValidationError,
)
from jobtracker.types import CREATED_DETAILS, STATUS_CHANGE_DETAILS, ApplicationDetail

logger = logging.getLogger(__name__)


class Repository:
    """Sole gateway to the datastore.

    Every public method runs inside one unit of work: a single session and
    transaction, committed once on success and rolled back on any failure.
    Multi-statement writes (application plus its activity, status update plus
    its activity, dependency check plus delete) are therefore all-or-nothing.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None, *, max_page_size: int | None = None):
        self.session_factory = session_factory or SessionLocal
        self.max_page_size = max_page_size or get_settings().max_page_size

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        try:
            with self.session_factory.begin() as session:
                yield session
        except TrackerError:
            raise
        except IntegrityError as exc:
            logger.warning("Write rejected by storage constraint: %s", exc.orig)
            raise DuplicateKeyError("write rejected by a storage constraint") from exc
        except SQLAlchemyError as exc:
            logger.error("Datastore operation failed: %s", exc)
            raise PersistenceError("datastore operation failed") from exc

    def check_page(self, limit: int, offset: int) -> None:
        if limit < 1:
            raise ValidationError("limit must be >= 1", field="limit")
        if limit > self.max_page_size:
            raise ValidationError(f"limit must be <= {self.max_page_size}", field="limit")
        if offset < 0:
            raise ValidationError("offset must be >= 0", field="offset")

    @staticmethod
    def _exists(session: Session, statement: Select) -> bool:
        return session.scalar(statement.limit(1)) is not None

    # users

    def create_user(self, *, email: str, password_hash: str, name: str) -> str:
        user_id = new_id()
        with self.unit_of_work() as session:
            session.add(User(id=user_id, email=email, password_hash=password_hash, name=name))
        return user_id

    def get_user(self, user_id: str) -> User | None:
        with self.unit_of_work() as session:
            return session.get(User, user_id)

    def list_users(self, limit: int, offset: int) -> list[User]:
        self.check_page(limit, offset)
        statement = select(User).order_by(User.created_at.desc(), User.id).limit(limit).offset(offset)
        with self.unit_of_work() as session:
            return list(session.scalars(statement).all())

    def update_user(self, user_id: str, *, email: str, password_hash: str, name: str) -> User:
        with self.unit_of_work() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError(f"user {user_id} not found", field="id")
            user.email = email
            user.password_hash = password_hash
            user.name = name
            return user

    def delete_user(self, user_id: str) -> None:
        with self.unit_of_work() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError(f"user {user_id} not found", field="id")
            if self._exists(session, select(Application.id).where(Application.user_id == user_id)):
                logger.warning("Delete blocked user_id=%s has applications", user_id)
                raise DependencyConflictError("Cannot delete user with existing applications", field="id")
            session.delete(user)

    def user_exists(self, user_id: str) -> bool:
        with self.unit_of_work() as session:
            return self._exists(session, select(User.id).where(User.id == user_id))

    def user_email_exists(self, email: str, *, exclude_id: str | None = None) -> bool:
        statement = select(User.id).where(User.email == email)
        if exclude_id:
            statement = statement.where(User.id != exclude_id)
        with self.unit_of_work() as session:
            return self._exists(session, statement)

    # companies

    def create_company(
        self,
        *,
        name: str,
        industry: str | None = None,
        location_city: str | None = None,
        location_state: str | None = None,
        company_url: str | None = None,
    ) -> str:
        company_id = new_id()
        with self.unit_of_work() as session:
            session.add(
                Company(
                    id=company_id,
                    name=name,
                    industry=industry,
                    location_city=location_city,
                    location_state=location_state,
                    company_url=company_url,
                )
            )
        return company_id

    def get_company(self, company_id: str) -> Company | None:
        with self.unit_of_work() as session:
            return session.get(Company, company_id)

    def list_companies(self, limit: int, offset: int) -> list[Company]:
        self.check_page(limit, offset)
        statement = select(Company).order_by(Company.created_at.desc(), Company.id).limit(limit).offset(offset)
        with self.unit_of_work() as session:
            return list(session.scalars(statement).all())

    def update_company(
        self,
        company_id: str,
        *,
        name: str,
        industry: str | None = None,
        location_city: str | None = None,
        location_state: str | None = None,
        company_url: str | None = None,
    ) -> Company:
        with self.unit_of_work() as session:
            company = session.get(Company, company_id)
            if company is None:
                raise NotFoundError(f"company {company_id} not found", field="id")
            company.name = name
            company.industry = industry
            company.location_city = location_city
            company.location_state = location_state
            company.company_url = company_url
            return company

    def delete_company(self, company_id: str) -> None:
        with self.unit_of_work() as session:
            company = session.get(Company, company_id)
            if company is None:
                raise NotFoundError(f"company {company_id} not found", field="id")
            if self._exists(session, select(Job.id).where(Job.company_id == company_id)):
                logger.warning("Delete blocked company_id=%s has jobs", company_id)
                raise DependencyConflictError("Cannot delete company with existing jobs", field="id")
            session.delete(company)

    def company_exists(self, company_id: str) -> bool:
        with self.unit_of_work() as session:
            return self._exists(session, select(Company.id).where(Company.id == company_id))

    def company_name_exists(self, name: str, *, exclude_id: str | None = None) -> bool:
        statement = select(Company.id).where(Company.name == name)
        if exclude_id:
            statement = statement.where(Company.id != exclude_id)
        with self.unit_of_work() as session:
            return self._exists(session, statement)

    # jobs

    def create_job(
        self,
        *,
        company_id: str,
        title: str,
        employment_type: str,
        work_type: str,
        job_url: str | None = None,
        salary_min: int | None = None,
        salary_max: int | None = None,
    ) -> str:
        job_id = new_id()
        with self.unit_of_work() as session:
            session.add(
                Job(
                    id=job_id,
                    company_id=company_id,
                    title=title,
                    employment_type=employment_type,
                    work_type=work_type,
                    job_url=job_url,
                    salary_min=salary_min,
                    salary_max=salary_max,
                )
            )
        return job_id

    def get_job(self, job_id: str) -> Job | None:
        with self.unit_of_work() as session:
            return session.get(Job, job_id)

    def list_jobs(self, limit: int, offset: int, *, company_id: str | None = None) -> list[Job]:
        self.check_page(limit, offset)
        statement = select(Job)
        if company_id:
            statement = statement.where(Job.company_id == company_id)
        statement = statement.order_by(Job.created_at.desc(), Job.id).limit(limit).offset(offset)
        with self.unit_of_work() as session:
            return list(session.scalars(statement).all())

    def update_job(
        self,
        job_id: str,
        *,
        company_id: str,
        title: str,
        employment_type: str,
        work_type: str,
        job_url: str | None = None,
        salary_min: int | None = None,
        salary_max: int | None = None,
    ) -> Job:
        with self.unit_of_work() as session:
            job = session.get(Job, job_id)
            if job is None:
                raise NotFoundError(f"job {job_id} not found", field="id")
            job.company_id = company_id
            job.title = title
            job.employment_type = employment_type
            job.work_type = work_type
            job.job_url = job_url
            job.salary_min = salary_min
            job.salary_max = salary_max
            return job

    def delete_job(self, job_id: str) -> None:
        with self.unit_of_work() as session:
            job = session.get(Job, job_id)
            if job is None:
                raise NotFoundError(f"job {job_id} not found", field="id")
            if self._exists(session, select(Application.id).where(Application.job_id == job_id)):
                logger.warning("Delete blocked job_id=%s has applications", job_id)
                raise DependencyConflictError("Cannot delete job with existing applications", field="id")
            session.delete(job)

    def job_exists(self, job_id: str) -> bool:
        with self.unit_of_work() as session:
            return self._exists(session, select(Job.id).where(Job.id == job_id))

    # applications

    def create_application(
        self,
        *,
        user_id: str,
        job_id: str,
        status: str,
        applied_at: datetime,
        source: str | None = None,
        notes: str | None = None,
    ) -> str:
        application_id = new_id()
        with self.unit_of_work() as session:
            session.add(
                Application(
                    id=application_id,
                    user_id=user_id,
                    job_id=job_id,
                    status=status,
                    applied_at=applied_at,
                    source=source,
                    notes=notes,
                    last_updated_at=applied_at,
                )
            )
            session.flush()
            self._append_activity(
                session,
                application_id=application_id,
                user_id=user_id,
                event_type="created",
                old_status=None,
                new_status=None,
                details=CREATED_DETAILS,
            )
        logger.info("Application created application_id=%s user_id=%s job_id=%s", application_id, user_id, job_id)
        return application_id

    def update_application_status(self, application_id: str, new_status: str, updated_at: datetime) -> None:
        with self.unit_of_work() as session:
            application = session.get(Application, application_id)
            if application is None:
                raise NotFoundError(f"application {application_id} not found", field="id")
            old_status = application.status
            application.status = new_status
            application.last_updated_at = updated_at
            session.flush()
            self._append_activity(
                session,
                application_id=application_id,
                user_id=application.user_id,
                event_type="status_change",
                old_status=old_status,
                new_status=new_status,
                details=STATUS_CHANGE_DETAILS,
            )
        logger.info(
            "Application status changed application_id=%s %s->%s", application_id, old_status, new_status
        )

    def update_application_notes(self, application_id: str, notes: str | None, updated_at: datetime) -> None:
        with self.unit_of_work() as session:
            application = session.get(Application, application_id)
            if application is None:
                raise NotFoundError(f"application {application_id} not found", field="id")
            application.notes = notes
            application.last_updated_at = updated_at

    def update_application_source(self, application_id: str, source: str | None, updated_at: datetime) -> None:
        with self.unit_of_work() as session:
            application = session.get(Application, application_id)
            if application is None:
                raise NotFoundError(f"application {application_id} not found", field="id")
            application.source = source
            application.last_updated_at = updated_at

    def delete_application(self, application_id: str) -> None:
        with self.unit_of_work() as session:
            application = session.get(Application, application_id)
            if application is None:
                raise NotFoundError(f"application {application_id} not found", field="id")
            session.execute(delete(Activity).where(Activity.application_id == application_id))
            session.delete(application)
        logger.info("Application deleted application_id=%s", application_id)

    def get_application(self, application_id: str) -> Application | None:
        with self.unit_of_work() as session:
            return session.get(Application, application_id)

    def get_application_detail(self, application_id: str) -> ApplicationDetail | None:
        statement = self._detail_statement().where(Application.id == application_id)
        with self.unit_of_work() as session:
            row = session.execute(statement).mappings().first()
        return ApplicationDetail(**row) if row else None

    def list_application_details(
        self,
        limit: int,
        offset: int,
        *,
        user_id: str | None = None,
        status: str | None = None,
    ) -> list[ApplicationDetail]:
        self.check_page(limit, offset)
        statement = self._detail_statement()
        if user_id:
            statement = statement.where(Application.user_id == user_id)
        if status:
            statement = statement.where(Application.status == status)
        statement = statement.order_by(Application.applied_at.desc(), Application.id).limit(limit).offset(offset)
        with self.unit_of_work() as session:
            rows = session.execute(statement).mappings().all()
        return [ApplicationDetail(**row) for row in rows]

    def application_exists(self, application_id: str) -> bool:
        with self.unit_of_work() as session:
            return self._exists(session, select(Application.id).where(Application.id == application_id))

    def user_job_application_exists(self, user_id: str, job_id: str) -> bool:
        statement = select(Application.id).where(Application.user_id == user_id, Application.job_id == job_id)
        with self.unit_of_work() as session:
            return self._exists(session, statement)

    @staticmethod
    def _detail_statement() -> Select:
        # Inner joins: an application whose user, job or company is gone drops out.
        return (
            select(
                Application.id,
                Application.user_id,
                Application.job_id,
                User.name.label("user_name"),
                User.email.label("user_email"),
                Company.name.label("company_name"),
                Job.title.label("job_title"),
                Application.status,
                Application.applied_at,
                Application.source,
                Application.notes,
                Application.last_updated_at,
            )
            .join(User, Application.user_id == User.id)
            .join(Job, Application.job_id == Job.id)
            .join(Company, Job.company_id == Company.id)
        )

    # activities

    def _append_activity(
        self,
        session: Session,
        *,
        application_id: str,
        user_id: str,
        event_type: str,
        old_status: str | None,
        new_status: str | None,
        details: str,
    ) -> Activity:
        event_time = utcnow()
        latest = session.scalar(
            select(Activity.event_time)
            .where(Activity.application_id == application_id)
            .order_by(Activity.event_time.desc())
            .limit(1)
        )
        if latest is not None and as_utc(latest) >= event_time:
            event_time = as_utc(latest) + timedelta(microseconds=1)

        activity = Activity(
            id=new_id(),
            application_id=application_id,
            user_id=user_id,
            event_type=event_type,
            old_status=old_status,
            new_status=new_status,
            event_time=event_time,
            details=details,
        )
        session.add(activity)
        session.flush()
        return activity

    def list_activity_for_application(self, application_id: str) -> list[Activity]:
        statement = (
            select(Activity)
            .where(Activity.application_id == application_id)
            .order_by(Activity.event_time.asc(), Activity.id)
        )
        with self.unit_of_work() as session:
            return list(session.scalars(statement).all())

    def list_activities(self, limit: int, offset: int, *, application_id: str | None = None) -> list[Activity]:
        self.check_page(limit, offset)
        statement = select(Activity)
        if application_id:
            statement = statement.where(Activity.application_id == application_id)
        statement = statement.order_by(Activity.event_time.desc(), Activity.id).limit(limit).offset(offset)
        with self.unit_of_work() as session:
            return list(session.scalars(statement).all())

    def get_activity(self, activity_id: str) -> Activity | None:
        with self.unit_of_work() as session:
            return session.get(Activity, activity_id)

    def update_activity_details(self, activity_id: str, details: str | None) -> Activity:
        with self.unit_of_work() as session:
            activity = session.get(Activity, activity_id)
            if activity is None:
                raise NotFoundError(f"activity {activity_id} not found", field="id")
            activity.details = details or ""
            return activity

    # reports

    def row_counts(self) -> dict[str, int]:
        models = {"users": User, "companies": Company, "jobs": Job, "applications": Application, "activities": Activity}
        with self.unit_of_work() as session:
            return {
                name: session.scalar(select(func.count()).select_from(model)) or 0
                for name, model in models.items()
            }
