"""
Marketplace application.

Providers, bookings and the pricing formula that produces a booking's
quoted total. Completing a paid booking hands off to the payout
orchestrator in the payments app.

Key components:
    - models.py: Provider, Booking and their status enums
    - pricing.py: calculate_price / get_suggested_rates / quote_booking
    - services.py: BookingService (create, read, status updates)
"""
