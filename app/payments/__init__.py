"""
Payments app for marketplace checkout and owner payouts.

This app handles:
- Hosted checkout sessions for field reservations (PayDunya)
- Webhook confirmation of payments, re-checked against the provider
- Platform commission and owner share computation
- Payouts of the owner share to mobile wallets (Wave, PayDunya push)
- Periodic retry and status sync of payouts (Celery beat)

Related apps:
    - bookings: Reservation and Field records, accessed via repositories
    - core: Base model, service and exception classes

Usage:
    from payments.services import CheckoutSessionManager

    session = CheckoutSessionManager.from_settings().create_checkout(
        reservation_id, request.user.id
    )
    redirect_to(session.checkout_url)
"""
