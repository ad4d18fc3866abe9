import argparse
import sys

from tabulate import tabulate

from purchase_planning.config import config
from purchase_planning.core.records import (
    EntityKind, ForecastMethod, ForecastWeights, PlanningRequest, WindowMode
)
from purchase_planning.exceptions import PlanningError, ValidationError
from purchase_planning.logging_setup import logger, get_logger, log_exception
from purchase_planning.utils.date_utils import get_current_month, month_label
from purchase_planning.utils.validation import validate_planning_request

def init_application():
    """Initialize application components."""
    from purchase_planning.db import db

    db.initialize()

    log = logger.app_logger
    log.info("Purchase Planning System initialized")
    log.info(f"Settings read from {config.path}")
    log.info(f"Using database type: {db.db_type}")

    return True

def setup_database(drop_existing=False):
    """Create the schema on a PostgreSQL database."""
    from purchase_planning.db import create_all_tables, drop_all_tables

    log = get_logger('setup')
    init_application()

    if drop_existing:
        log.warning("Dropping existing tables")
        drop_all_tables()

    create_all_tables()
    log.info("Database schema created")

def build_request(args) -> PlanningRequest:
    """Build a planning request from command-line arguments.

    Raises:
        ValidationError if the arguments do not describe a valid request
    """
    settings = config.planning_config

    method = ForecastMethod.from_string(args.method or settings['default_method'])

    if args.weights:
        weights = ForecastWeights(*args.weights)
    else:
        weights = ForecastWeights(settings['weight_avg'], settings['weight_trend'], settings['weight_exp'])

    horizon = getattr(args, 'horizon', None)
    manual = bool(args.start or args.end)
    request = PlanningRequest(
        reference_month=args.month or get_current_month(),
        method=method,
        weights=weights,
        window_mode=WindowMode.MANUAL if manual else WindowMode.AUTO,
        start_month=args.start,
        end_month=args.end,
        history_months=args.history_months if args.history_months is not None else settings['history_months'],
        horizon=horizon if horizon is not None else settings['projection_horizon']
    )

    errors = validate_planning_request(request)
    if errors:
        raise ValidationError("Invalid planning request", code='INVALID_REQUEST', details=errors)

    return request

def money(value):
    return f"{value:,.2f}"

def run_projection(args):
    """Print the per-supplier projection."""
    from purchase_planning.db import open_data_source
    from purchase_planning.services.forecast_service import ForecastService

    log = get_logger('projection')
    request = build_request(args)
    kind = EntityKind.PURCHASES if args.purchases else EntityKind.SALES

    with open_data_source() as source:
        result = ForecastService(source).project(request, kind)

    if not result.rows:
        log.warning(f"No {kind.value} found in window {result.window.caption}")
        return False

    headers = ['Proveedor'] + [month_label(m) for m in result.window.months] + [
        'Total ventana', 'Próximo mes', f'Total {result.horizon}m'
    ]
    table_data = [
        [row.supplier_name] + [money(v) for v in row.history] + [
            money(row.total_window), money(row.next_month), money(row.total_horizon)
        ]
        for row in result.rows
    ]

    print(f"\nProjection ({request.method.value}) - window {result.window.caption}")
    print(tabulate(table_data, headers=headers))
    print(f"\nNext month total: {money(result.total_next_month)}")
    print(f"Horizon total: {money(result.total_horizon)}")
    return True

def run_plan(args):
    """Print the suggested purchase plan, optionally saving it."""
    from purchase_planning.db import open_data_source
    from purchase_planning.services.planning_service import PlanningService

    log = get_logger('planning')
    request = build_request(args)
    with open_data_source() as source:
        service = PlanningService(source)

        proposal = service.build_plan(request)

        table_data = [
            [
                line.supplier_name,
                f"{line.factor:.2f}",
                money(line.forecast_next),
                money(line.proposed_cost),
                money(line.restock_cost),
                money(line.mix_cost)
            ]
            for line in proposal.lines
        ]
        totals = proposal.totals

        print(f"\nPurchase plan for {month_label(proposal.target_month)} - window {proposal.window.caption}")
        print(f"Method: {request.method.value}, default factor {proposal.default_factor:.2f}")
        print(tabulate(
            table_data,
            headers=['Proveedor', 'Factor', 'Pronóstico', 'Propuesto', 'Reposición', 'Mix']
        ))
        print(
            f"\nTotals - forecast {money(totals.total_forecast)}, proposed {money(totals.total_proposed)}, "
            f"restock {money(totals.total_restock)}, mix {money(totals.total_mix)}"
        )

        if args.kpis:
            kpis = service.month_kpis(request.reference_month)
            print(tabulate(
                [
                    ['Supplier cost of sales', money(kpis['supplier_cost'])],
                    ['Payables due', money(kpis['payables_due_total'])],
                    ['Payables paid', money(kpis['payables_due_paid'])],
                    ['Payables pending', money(kpis['payables_due_pending'])],
                ],
                headers=[month_label(request.reference_month), '']
            ))

        if args.save:
            plan_id = service.save_plan(proposal)
            log.info(f"Plan saved with ID {plan_id}")
            print(f"\nSaved plan {plan_id}")

    return True

def run_plans(args):
    """List, show or delete saved plans."""
    from purchase_planning.db import open_data_source
    from purchase_planning.services.planning_service import PlanningService

    with open_data_source() as source:
        service = PlanningService(source)

        if args.plans_command == 'show':
            plan = service.get_plan(args.plan_id)
            print(f"\nPlan {plan['id']} - {plan['plan_month']} ({plan['method']})")
            print(tabulate(
                [
                    [line['supplier_name'], line['factor'], line['forecast_next'], line['proposed'], line['final']]
                    for line in plan['lines']
                ],
                headers=['Proveedor', 'Factor', 'Pronóstico', 'Propuesto', 'Final']
            ))
            return True

        if args.plans_command == 'delete':
            service.delete_plan(args.plan_id)
            print(f"Deleted plan {args.plan_id}")
            return True

        plans = service.list_plans()
        print(tabulate(
            [
                [p['id'], p['plan_month'], p['method'], (p.get('totals') or {}).get('final', 0), p.get('created_at')]
                for p in plans
            ],
            headers=['ID', 'Mes', 'Método', 'Total', 'Creado']
        ))
        return True

def run_cash(args):
    """Print the month's collection and supplier payment plan."""
    from purchase_planning.db import open_data_source
    from purchase_planning.services.cash_planning_service import CashPlanningService

    month = args.month or get_current_month()
    with open_data_source() as source:
        summary = CashPlanningService(source).monthly_summary(month)
    planning = summary.planning

    print(f"\nCash plan for {month_label(month)}")
    print(f"Collection ratio: {planning.collection_ratio:.2%}")
    print(tabulate(
        [
            [
                family,
                money(summary.family_sales[family]),
                money(planning.net_collected_by_family.get(family, 0.0)),
                money(planning.requirement_by_family.get(family, 0.0))
            ]
            for family in summary.family_sales
        ],
        headers=['Familia', 'Facturado', 'Cobrado neto', 'Requerimiento']
    ))
    print()
    print(tabulate(
        [
            ['Deposited', money(planning.total_deposited)],
            ['After vouchers', money(planning.post_voucher_liquidity)],
            ['Supplier requirement', money(planning.total_requirement)],
            ['Paid to suppliers', money(planning.paid_to_suppliers)],
            ['Shortfall', money(planning.shortfall)],
            ['Operating budget', money(planning.operating_budget)],
            ['Operating paid', money(planning.operating_paid)],
            ['Operating headroom', money(planning.operating_headroom)],
        ]
    ))
    return True

def add_request_arguments(parser, horizon=False):
    parser.add_argument('--month', type=str, help='Working month (YYYY-MM), defaults to the current month')
    parser.add_argument('--method', type=str, choices=[m.value for m in ForecastMethod],
                        help='Forecast method')
    parser.add_argument('--weights', type=float, nargs=3, metavar=('AVG', 'TREND', 'EXP'),
                        help='Weights for the weighted method')
    parser.add_argument('--start', type=str, help='Manual window start month (YYYY-MM)')
    parser.add_argument('--end', type=str, help='Manual window end month (YYYY-MM)')
    parser.add_argument('--history-months', type=int, help='Automatic window length in months')
    if horizon:
        parser.add_argument('--horizon', type=int, help='Months to project')

def create_parser():
    parser = argparse.ArgumentParser(description='Purchase Planning System')

    parser.add_argument('--setup-db', action='store_true',
                        help='Set up the database schema')
    parser.add_argument('--drop-db', action='store_true',
                        help='Drop existing tables before setup')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    project_parser = subparsers.add_parser('project', help='Project monthly totals per supplier')
    add_request_arguments(project_parser, horizon=True)
    project_parser.add_argument('--purchases', action='store_true',
                                help='Project purchases instead of sales')

    plan_parser = subparsers.add_parser('plan', help='Build the suggested purchase plan')
    add_request_arguments(plan_parser)
    plan_parser.add_argument('--save', action='store_true', help='Save the plan')
    plan_parser.add_argument('--kpis', action='store_true', help='Show the working month figures')

    plans_parser = subparsers.add_parser('plans', help='Manage saved plans')
    plans_sub = plans_parser.add_subparsers(dest='plans_command')
    plans_sub.add_parser('list', help='List saved plans')
    show_parser = plans_sub.add_parser('show', help='Show a saved plan')
    show_parser.add_argument('plan_id', type=int)
    delete_parser = plans_sub.add_parser('delete', help='Delete a saved plan')
    delete_parser.add_argument('plan_id', type=int)

    cash_parser = subparsers.add_parser('cash', help='Monthly collection and supplier payment plan')
    cash_parser.add_argument('--month', type=str, help='Month (YYYY-MM), defaults to the current month')

    return parser

def run_parameters(args):
    """Command-line options worth recording in the run log."""
    skip = {'command', 'setup_db', 'drop_db'}
    return {
        key: value for key, value in vars(args).items()
        if key not in skip and value not in (None, False)
    }

COMMANDS = {
    'project': run_projection,
    'plan': run_plan,
    'plans': run_plans,
    'cash': run_cash,
}

def main(argv=None):
    """Main application entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.setup_db:
        setup_database(args.drop_db)
        return 0

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    log = get_logger('cli')
    try:
        with logger.run_log(args.command, **run_parameters(args)):
            succeeded = handler(args)
        return 0 if succeeded else 1
    except ValidationError as e:
        log.error(str(e))
        for field_name, message in e.field_errors.items():
            print(f"  {field_name}: {message}", file=sys.stderr)
        return 2
    except PlanningError as e:
        log_exception('cli', e, f"{args.command} failed")
        return 1

if __name__ == "__main__":
    sys.exit(main())
