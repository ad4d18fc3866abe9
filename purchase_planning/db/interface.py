# purchase_planning/db/interface.py
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from purchase_planning.core.records import EntityKind, Transaction
from purchase_planning.exceptions import DatabaseError
from purchase_planning.models import AppParam, Base, Purchase, PurchasePlan, PurchasePlanLine, Sale, Supplier
from purchase_planning.utils.validation import coerce_transactions

# Table, date column and supplier-joined select for each transaction kind
ENTITY_SOURCES = {
    EntityKind.SALES: ('sales', 'date', 'date,amount,supplier_id,suppliers(name,factor)'),
    EntityKind.PURCHASES: ('purchases', 'pay_date', 'pay_date,amount,supplier_id,suppliers(name,factor)'),
}

class DataSource(ABC):
    """What the planning services need from the data store."""

    @abstractmethod
    def fetch_transactions(self, entity_kind: EntityKind, start: str, end_exclusive: str) -> List[Transaction]:
        """Fetch transactions dated in [start, end_exclusive)."""
        pass

    @abstractmethod
    def fetch_scalar_param(self, key: str) -> Optional[float]:
        """Fetch a numeric application parameter, None if absent."""
        pass

    @abstractmethod
    def fetch_month_rows(self, table_name: str, date_column: str, start: str, end_exclusive: str) -> List[Dict[str, Any]]:
        """Fetch raw rows of a table whose ``date_column`` is in range."""
        pass

    @abstractmethod
    def insert_plan(self, header: Dict[str, Any], lines: List[Dict[str, Any]]) -> Any:
        """Store a plan header and its lines, returning the new plan ID."""
        pass

    @abstractmethod
    def list_plans(self) -> List[Dict[str, Any]]:
        """List saved plan headers, newest month first."""
        pass

    @abstractmethod
    def get_plan(self, plan_id: Any) -> Optional[Dict[str, Any]]:
        """Get a saved plan header with its ``lines``."""
        pass

    @abstractmethod
    def delete_plan(self, plan_id: Any) -> int:
        """Delete a saved plan and its lines, returning the number of plans deleted."""
        pass

class SupabaseDataSource(DataSource):
    """Supabase implementation."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def _execute(self, query, action: str) -> List[Dict[str, Any]]:
        try:
            result = query.execute()
        except Exception as e:
            raise DatabaseError(f"Supabase {action} error: {str(e)}")

        if getattr(result, 'error', None):
            raise DatabaseError(f"Supabase {action} error: {result.error}")

        return result.data if result.data else []

    def fetch_transactions(self, entity_kind: EntityKind, start: str, end_exclusive: str) -> List[Transaction]:
        table_name, date_column, columns = ENTITY_SOURCES[entity_kind]
        query = (
            self.client.table(table_name)
            .select(columns)
            .gte(date_column, start)
            .lt(date_column, end_exclusive)
        )
        rows = self._execute(query, 'query')
        return coerce_transactions(rows, date_column)

    def fetch_scalar_param(self, key: str) -> Optional[float]:
        query = self.client.table('app_params').select('key,value_num').eq('key', key).limit(1)
        rows = self._execute(query, 'query')
        if not rows:
            return None
        return rows[0].get('value_num')

    def fetch_month_rows(self, table_name: str, date_column: str, start: str, end_exclusive: str) -> List[Dict[str, Any]]:
        query = (
            self.client.table(table_name)
            .select('*')
            .gte(date_column, start)
            .lt(date_column, end_exclusive)
            .order(date_column)
        )
        return self._execute(query, 'query')

    def insert_plan(self, header: Dict[str, Any], lines: List[Dict[str, Any]]) -> Any:
        inserted = self._execute(self.client.table('purchase_plans').insert(header), 'insert')
        if not inserted:
            raise DatabaseError("Supabase insert error: plan header was not returned")

        plan_id = inserted[0]['id']
        if lines:
            rows = [dict(line, plan_id=plan_id) for line in lines]
            self._execute(self.client.table('purchase_plan_lines').insert(rows), 'insert')

        return plan_id

    def list_plans(self) -> List[Dict[str, Any]]:
        query = self.client.table('purchase_plans').select('*').order('plan_month', desc=True)
        return self._execute(query, 'query')

    def get_plan(self, plan_id: Any) -> Optional[Dict[str, Any]]:
        headers = self._execute(
            self.client.table('purchase_plans').select('*').eq('id', plan_id).limit(1), 'query'
        )
        if not headers:
            return None

        plan = dict(headers[0])
        plan['lines'] = self._execute(
            self.client.table('purchase_plan_lines').select('*').eq('plan_id', plan_id), 'query'
        )
        return plan

    def delete_plan(self, plan_id: Any) -> int:
        self._execute(self.client.table('purchase_plan_lines').delete().eq('plan_id', plan_id), 'delete')
        deleted = self._execute(self.client.table('purchase_plans').delete().eq('id', plan_id), 'delete')
        return len(deleted)

def _plain(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value

def _row_to_dict(obj) -> Dict[str, Any]:
    return {column.name: _plain(getattr(obj, column.key)) for column in obj.__table__.columns}

def _to_date(value):
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])

class SQLAlchemyDataSource(DataSource):
    """SQLAlchemy implementation over the models in ``purchase_planning.models``."""

    ENTITY_MODELS = {
        EntityKind.SALES: (Sale, 'date'),
        EntityKind.PURCHASES: (Purchase, 'pay_date'),
    }

    def __init__(self, session):
        """Initialize with a SQLAlchemy session."""
        self.session = session

    def _model_for_table(self, table_name: str):
        for mapper in Base.registry.mappers:
            if mapper.class_.__tablename__ == table_name:
                return mapper.class_
        raise DatabaseError(f"Unknown table: {table_name}")

    def fetch_transactions(self, entity_kind: EntityKind, start: str, end_exclusive: str) -> List[Transaction]:
        model, date_attr = self.ENTITY_MODELS[entity_kind]
        date_column = getattr(model, date_attr)

        try:
            results = (
                self.session.query(model, Supplier)
                .outerjoin(Supplier, model.supplier_id == Supplier.id)
                .filter(date_column >= _to_date(start), date_column < _to_date(end_exclusive))
                .order_by(date_column)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Query error on {model.__tablename__}: {str(e)}")

        rows = [
            {
                date_attr: getattr(record, date_attr),
                'amount': record.amount,
                'supplier_id': record.supplier_id,
                'suppliers': {'name': supplier.name, 'factor': supplier.factor} if supplier else None,
            }
            for record, supplier in results
        ]
        return coerce_transactions(rows, date_attr)

    def fetch_scalar_param(self, key: str) -> Optional[float]:
        try:
            param = self.session.get(AppParam, key)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Query error on app_params: {str(e)}")

        return param.value_num if param else None

    def fetch_month_rows(self, table_name: str, date_column: str, start: str, end_exclusive: str) -> List[Dict[str, Any]]:
        model = self._model_for_table(table_name)
        column = getattr(model, date_column, None)
        if column is None:
            raise DatabaseError(f"Unknown column {date_column} on {table_name}")

        try:
            records = (
                self.session.query(model)
                .filter(column >= _to_date(start), column < _to_date(end_exclusive))
                .order_by(column)
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Query error on {table_name}: {str(e)}")

        return [_row_to_dict(record) for record in records]

    def insert_plan(self, header: Dict[str, Any], lines: List[Dict[str, Any]]) -> Any:
        values = dict(header)
        values['plan_month'] = _to_date(values['plan_month'])

        plan = PurchasePlan(**values)
        plan.lines = [PurchasePlanLine(**line) for line in lines]

        try:
            self.session.add(plan)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(f"Insert error on purchase_plans: {str(e)}")

        return plan.id

    def list_plans(self) -> List[Dict[str, Any]]:
        try:
            plans = (
                self.session.query(PurchasePlan)
                .order_by(PurchasePlan.plan_month.desc(), PurchasePlan.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Query error on purchase_plans: {str(e)}")

        return [_row_to_dict(plan) for plan in plans]

    def get_plan(self, plan_id: Any) -> Optional[Dict[str, Any]]:
        try:
            plan = self.session.get(PurchasePlan, plan_id)
            if plan is None:
                return None
            lines = [_row_to_dict(line) for line in plan.lines]
        except SQLAlchemyError as e:
            raise DatabaseError(f"Query error on purchase_plans: {str(e)}")

        result = _row_to_dict(plan)
        result['lines'] = lines
        return result

    def delete_plan(self, plan_id: Any) -> int:
        try:
            plan = self.session.get(PurchasePlan, plan_id)
            if plan is None:
                return 0

            self.session.delete(plan)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(f"Delete error on purchase_plans: {str(e)}")

        return 1
