# -*- coding: utf-8 -*-
"""
Next Step Automation
Derives the follow-up actions for a project request from its current
status and the time it entered that status. Nothing is persisted; steps
are recomputed on every read.
"""
import math
from collections import namedtuple, Counter
from datetime import timedelta

from enerjios.models import ProjectRequestStatus as S


NextStepRule = namedtuple(
    'NextStepRule', 'from_status step_type title description days priority'
)

NEXT_STEP_RULES = (
    NextStepRule(S.OPEN, 'CONTACT_CUSTOMER', 'Müşteriyle İletişime Geç',
                 'Müşteri ile ilk iletişimi kurarak ihtiyaçlarını öğren', 1, 'HIGH'),
    NextStepRule(S.CONTACTED, 'SCHEDULE_SITE_VISIT', 'Saha Ziyareti Planla',
                 'Müşteri ile saha ziyareti randevusu ayarla', 3, 'HIGH'),
    NextStepRule(S.ASSIGNED, 'TECHNICAL_REVIEW', 'Teknik İnceleme',
                 'Atanan ekip teknik inceleme yapmalı', 2, 'MEDIUM'),
    NextStepRule(S.SITE_VISIT, 'SEND_QUOTE', 'Teklif Gönder',
                 'Saha incelemesi sonrası detaylı teklif hazırla', 2, 'HIGH'),
    NextStepRule(S.SITE_VISIT, 'FOLLOW_UP_QUOTE', 'Teklif Takibi',
                 'Gönderilen teklifin takibini yap', 7, 'MEDIUM'),
    NextStepRule(S.CONVERTED_TO_PROJECT, 'PROJECT_KICKOFF', 'Proje Başlatma',
                 'Proje başlangıç süreçlerini başlat', 1, 'HIGH'),
    NextStepRule(S.CONVERTED_TO_PROJECT, 'DOCUMENT_PREPARATION', 'Dokümantasyon Hazırla',
                 'Proje dokümantasyonunu ve sözleşmeleri hazırla', 3, 'MEDIUM'),
)

PRIORITY_ORDER = {'HIGH': 0, 'MEDIUM': 1, 'LOW': 2}

STEP_ICONS = {
    'CONTACT_CUSTOMER': '📞',
    'SCHEDULE_SITE_VISIT': '📅',
    'SEND_QUOTE': '📄',
    'FOLLOW_UP_QUOTE': '🔄',
    'PROJECT_KICKOFF': '🚀',
    'TECHNICAL_REVIEW': '🔍',
    'DOCUMENT_PREPARATION': '📋',
}


def rules_for_status(status):
    return [rule for rule in NEXT_STEP_RULES if rule.from_status == status]


def calculate_next_steps(request, now):
    """
    Next steps for one project request.

    due_date = status change time + rule offset; a step is overdue once
    `now` is past its due date. Sorted by priority, then due date.
    """
    changed_at = request.last_status_change()
    steps = []
    for index, rule in enumerate(rules_for_status(request.status)):
        due_date = changed_at + timedelta(days=rule.days)
        steps.append({
            'id': f"{request.id}-{rule.step_type}-{index}",
            'request_id': request.id,
            'type': rule.step_type,
            'title': rule.title,
            'description': rule.description,
            'due_date': due_date,
            'priority': rule.priority,
            'is_overdue': now > due_date,
            'is_due_today': now.date() == due_date.date(),
            'status': 'PENDING',
            'created_at': changed_at,
        })

    steps.sort(key=lambda step: (PRIORITY_ORDER[step['priority']], step['due_date']))
    return steps


def calculate_next_steps_for_requests(requests, now):
    return {request.id: calculate_next_steps(request, now) for request in requests}


def get_next_step_stats(requests, now):
    all_steps = [step for request in requests for step in calculate_next_steps(request, now)]
    return {
        'total': len(all_steps),
        'overdue': sum(1 for s in all_steps if s['is_overdue']),
        'due_today': sum(1 for s in all_steps if s['is_due_today']),
        'pending': sum(1 for s in all_steps if s['status'] == 'PENDING'),
        'high_priority': sum(1 for s in all_steps if s['priority'] == 'HIGH'),
        'by_type': dict(Counter(s['type'] for s in all_steps)),
    }


def format_next_step(step, now):
    """JSON-ready step with urgency text for dashboards"""
    days_until_due = math.ceil((step['due_date'] - now).total_seconds() / 86400)

    if step['is_overdue']:
        urgency = f"{abs(days_until_due)} gün gecikmiş"
    elif step['is_due_today']:
        urgency = 'Bugün'
    else:
        urgency = f"{days_until_due} gün kaldı"

    formatted = dict(step)
    formatted.update({
        'due_date': step['due_date'].isoformat(),
        'created_at': step['created_at'].isoformat() if step['created_at'] else None,
        'icon': STEP_ICONS.get(step['type']),
        'days_until_due': days_until_due,
        'urgency_text': urgency,
    })
    return formatted
