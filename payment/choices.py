from django.db import models


class TransactionTypeChoices(models.TextChoices):
    DEPOSIT = 'deposit', 'Deposit' #money put into the deposit balance (top-up approval or a refund of job escrow)
    WITHDRAWAL = 'withdrawal', 'Withdrawal' #user withdrawing money from their earning balance
    PAYMENT = 'payment', 'Payment' #deposit balance spent on a job posting or a subscription
    EARNING = 'earning', 'Earning' #worker paid for approved work
    REFERRAL = 'referral', 'Referral' #commission paid to a referrer
    REFUND = 'refund', 'Refund'
    BONUS = 'bonus', 'Bonus'
    CONVERSION = 'conversion', 'Conversion' #earning balance converted into deposit balance


class TransactionStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending' #waiting for an admin to settle it
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'
    CANCELLED = 'cancelled', 'Cancelled'
