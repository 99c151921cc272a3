import unittest
from datetime import date

from fx_export.utils.date_range import DateRange, backward_window, default_end_date, parse_date


class DateRangeTests(unittest.TestCase):
    def test_backward_window(self) -> None:
        self.assertEqual(
            backward_window("2024-03-10", 3),
            [date(2024, 3, 10), date(2024, 3, 9), date(2024, 3, 8)],
        )

    def test_backward_window_crosses_month_and_leap_day(self) -> None:
        self.assertEqual(
            backward_window(date(2024, 3, 1), 2),
            [date(2024, 3, 1), date(2024, 2, 29)],
        )

    def test_zero_days_is_empty(self) -> None:
        self.assertEqual(backward_window("2024-03-10", 0), [])

    def test_invalid_input(self) -> None:
        with self.assertRaises(ValueError):
            backward_window("2024-03-10", -1)
        with self.assertRaises(ValueError):
            parse_date("10/03/2024")

    def test_iter_backward(self) -> None:
        span = DateRange(start=date(2024, 1, 30), end=date(2024, 2, 1))
        self.assertEqual(
            list(span.iter_backward()),
            [date(2024, 2, 1), date(2024, 1, 31), date(2024, 1, 30)],
        )
        self.assertEqual(span.as_tuple(), (date(2024, 1, 30), date(2024, 2, 1)))

    def test_default_end_date_is_yesterday(self) -> None:
        self.assertEqual(default_end_date(date(2024, 1, 1)), date(2023, 12, 31))


if __name__ == "__main__":
    unittest.main()
