from .loader import check_input_file, load_orders, parse_orders

__all__ = ["check_input_file", "load_orders", "parse_orders"]
