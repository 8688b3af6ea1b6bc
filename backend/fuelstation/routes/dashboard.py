from datetime import datetime
from flask import request, jsonify, current_app
from fuelstation import financials
from fuelstation.extensions import db
from fuelstation.models import FuelTypeEnum
from utils.periods import resolve_period, parse_datetime

FUEL_TYPES = {fuel.value for fuel in FuelTypeEnum}


def _requested_period():
    return resolve_period(
        request.args.get("period"),
        request.args.get("startDate"),
        request.args.get("endDate"),
    )


def _requested_station():
    station_id = request.args.get("stationId")
    if not station_id or station_id == "all":
        return None
    try:
        parsed = int(station_id)
    except ValueError:
        raise ValueError(f"Invalid stationId '{station_id}'")
    if parsed < 1:
        raise ValueError(f"Invalid stationId '{station_id}'")
    return parsed


def _bad_request(error):
    return jsonify({"success": False, "error": str(error)}), 400


def _report(label, build, *args, **kwargs):
    try:
        data = build(*args, **kwargs)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error generating %s", label)
        return jsonify({"success": False, "error": "Server Error"}), 500
    return jsonify({"success": True, "data": data})


def get_financial_summary():
    try:
        period = _requested_period()
        station_id = _requested_station()
    except ValueError as e:
        return _bad_request(e)
    return _report("financial summary", financials.financial_summary, period, station_id)


def get_profit_loss_statement():
    try:
        period = _requested_period()
        station_id = _requested_station()
    except ValueError as e:
        return _bad_request(e)
    return _report("profit & loss statement", financials.profit_loss_statement, period, station_id)


def get_balance_sheet():
    try:
        as_of = parse_datetime(request.args.get("asOfDate"), "asOfDate", end_of_day=True) or datetime.utcnow()
        station_id = _requested_station()
    except ValueError as e:
        return _bad_request(e)
    return _report("balance sheet", financials.balance_sheet, as_of, station_id)


def get_cash_flow_statement():
    try:
        period = _requested_period()
        station_id = _requested_station()
    except ValueError as e:
        return _bad_request(e)
    return _report("cash flow statement", financials.cash_flow_statement, period, station_id)


def get_fuel_price_analysis():
    fuel_type = request.args.get("fuelType") or None
    if fuel_type and fuel_type not in FUEL_TYPES:
        return _bad_request(f"Unknown fuelType '{fuel_type}'")
    try:
        period = _requested_period()
    except ValueError as e:
        return _bad_request(e)
    return _report(
        "fuel price analysis", financials.fuel_price_analysis, period, fuel_type,
        cost_prices=current_app.config.get("FUEL_COST_PRICES"),
    )
