import random
from datetime import datetime, timezone

import pytest

from melidash.services.reputation_service import ReputationService
from melidash.utils.exceptions import NotFoundError, ValidationError

DEADLINE = datetime(2024, 6, 30, tzinfo=timezone.utc)


@pytest.fixture
def reputation(settings):
    return ReputationService(settings, rng=random.Random(7))


@pytest.mark.parametrize('overall, status, color', [
    (99, 'burning', '#ef4444'),
    (95, 'burning', '#ef4444'),
    (87, 'hot', '#f97316'),
    (70, 'warm', '#eab308'),
    (50, 'cool', '#3b82f6'),
    (49.9, 'cold', '#6366f1'),
])
def test_temperature_bands(overall, status, color):
    assert ReputationService.calculate_temperature({'overall': overall}) == (overall, status, color)


@pytest.mark.asyncio
async def test_metrics_and_trends(reputation):
    metrics = await reputation.get_reputation_metrics()
    assert metrics['overall'] == 87
    assert ReputationService.calculate_temperature(metrics)[1] == 'hot'

    trends = await reputation.get_reputation_trends(2)
    assert [t['review_count'] for t in trends] == [52, 58]
    assert await reputation.get_reputation_trends(0) == []


@pytest.mark.asyncio
async def test_review_filters(reputation):
    assert [r['id'] for r in await reputation.get_reviews()] == ['1', '2', '3']
    assert [r['id'] for r in await reputation.get_reviews(needs_response=True)] == ['2']
    assert [r['id'] for r in await reputation.get_reviews(sentiment='negative')] == ['2']
    assert [r['id'] for r in await reputation.get_reviews(category='delivery')] == ['1', '3']
    assert [r['id'] for r in await reputation.get_reviews(limit=2)] == ['1', '2']


@pytest.mark.asyncio
async def test_respond_to_review_resolves_and_clears_alerts(reputation):
    review = await reputation.respond_to_review('2', 'Sorry! A replacement is on the way.', is_public=False)

    assert review['is_resolved']
    assert review['response']['id'].startswith('resp-')
    assert review['response']['is_public'] is False
    assert [a['id'] for a in await reputation.get_reputation_alerts()] == ['alert-2']
    assert await reputation.get_reviews(needs_response=True) == []


@pytest.mark.asyncio
async def test_respond_to_unknown_review(reputation):
    with pytest.raises(NotFoundError):
        await reputation.respond_to_review('missing', 'hello')


@pytest.mark.asyncio
async def test_alerts(reputation):
    assert [a['id'] for a in await reputation.get_reputation_alerts()] == ['alert-1', 'alert-2']

    assert await reputation.mark_alert_as_read('alert-1')
    assert [a['id'] for a in await reputation.get_reputation_alerts(unread_only=True)] == ['alert-2']
    assert not await reputation.mark_alert_as_read('missing')

    assert await reputation.dismiss_alert('alert-2')
    assert not await reputation.dismiss_alert('alert-2')


@pytest.mark.asyncio
async def test_goal_lifecycle(reputation):
    goal = await reputation.create_reputation_goal('delivery', 95, DEADLINE)

    assert goal['id'].startswith('goal-')
    assert goal['current'] == 92
    assert goal['is_active']

    updated = await reputation.update_reputation_goal(goal['id'], {'target': 97, 'id': 'other'})
    assert updated['target'] == 97
    assert updated['id'] == goal['id']
    assert await reputation.get_reputation_goals() == [updated]

    assert await reputation.delete_reputation_goal(goal['id'])
    assert not await reputation.delete_reputation_goal(goal['id'])


@pytest.mark.asyncio
async def test_goal_validation(reputation):
    with pytest.raises(ValidationError):
        await reputation.create_reputation_goal('speed', 90, DEADLINE)
    with pytest.raises(NotFoundError):
        await reputation.update_reputation_goal('missing', {'target': 1})


@pytest.mark.parametrize('comment, expected', [
    ('Excellent product, fast delivery!', 'positive'),
    ('Product arrived with a defect.', 'negative'),
    ('Good product, but delivery took longer than expected.', 'neutral'),
    ('It arrived on Tuesday.', 'neutral'),
])
def test_analyze_sentiment(comment, expected):
    assert ReputationService.analyze_sentiment(comment) == expected


def test_realtime_update_moves_at_most_two_points(reputation):
    before = dict(reputation.metrics)
    after = reputation.simulate_realtime_update()

    for key in ('overall', 'delivery', 'communication', 'product_quality', 'customer_service'):
        assert abs(after[key] - before[key]) <= 2


def test_realtime_update_is_clamped(reputation):
    reputation.metrics['overall'] = 99.5
    reputation.metrics['customer_service'] = 0.5

    for _ in range(20):
        metrics = reputation.simulate_realtime_update()
        assert 0 <= metrics['overall'] <= 100
        assert 0 <= metrics['customer_service'] <= 100


@pytest.mark.asyncio
async def test_reputation_report(reputation):
    report = await reputation.generate_reputation_report('month')

    assert report['period'] == 'month'
    assert report['summary']['overall'] == 87
    assert len(report['trends']) == 3
    assert report['top_issues'] == [{'category': 'product_quality', 'count': 1, 'avg_rating': 2.0}]
    assert len(report['improvements']) == 5


@pytest.mark.asyncio
async def test_report_rejects_unknown_period(reputation):
    with pytest.raises(ValidationError):
        await reputation.generate_reputation_report('year')
