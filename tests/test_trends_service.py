import pytest

from melidash.config.settings import Settings
from melidash.services.trends_service import TrendsService


@pytest.fixture
def trends(settings):
    return TrendsService(settings)


@pytest.mark.asyncio
async def test_trend_data_sorted_by_growth(trends):
    data = await trends.get_trend_data()
    assert [t['id'] for t in data] == ['1', '3', '2']

    electronics = await trends.get_trend_data('30d', category='Electronics')
    assert [t['id'] for t in electronics] == ['1']

    assert [t['id'] for t in await trends.get_trend_data('7d')] == ['4']


@pytest.mark.asyncio
async def test_search_matches_related_keywords(trends):
    assert [t['id'] for t in await trends.search_trends('LAPTOP')] == ['2']
    assert [t['id'] for t in await trends.search_trends('5g')] == ['1']
    assert await trends.search_trends('bicycle') == []


@pytest.mark.asyncio
async def test_top_growing_and_seasonal(trends):
    assert [t['id'] for t in await trends.get_top_growing_trends(limit=2)] == ['1', '3']
    assert [t['id'] for t in await trends.get_seasonal_trends()] == ['1', '2']
    assert len(await trends.get_trends_by_category('Electronics')) == 2


@pytest.mark.asyncio
async def test_trend_summary(trends):
    summary = await trends.get_trend_summary()

    assert summary['total_trends'] == 4
    assert summary['growing_trends'] == 2
    assert summary['declining_trends'] == 1
    assert summary['stable_trends'] == 1
    assert [c['category'] for c in summary['top_categories']] == ['Sports', 'Electronics', 'Computers']
    electronics = summary['top_categories'][1]
    assert electronics['count'] == 2
    assert electronics['avg_growth'] == pytest.approx(11.75)


@pytest.mark.asyncio
async def test_competitors_by_market_share(trends):
    competitors = await trends.get_competitors()
    assert [c['competitor_name'] for c in competitors] == ['MegaEletro', 'TechStore']
    assert (await trends.get_competitor_by_id('1'))['competitor_name'] == 'TechStore'
    assert await trends.get_competitor_by_id('missing') is None


@pytest.mark.asyncio
async def test_add_update_remove_competitor(trends):
    added = await trends.add_competitor({'competitor_name': 'NewShop', 'competitor_url': 'https://newshop.com.br'})

    assert added['id'] not in ('1', '2')
    assert added['products'] == []
    assert added['last_analyzed'] is not None

    updated = await trends.update_competitor(added['id'], {'market_share': 30.0, 'id': 'hijack'})
    assert updated['id'] == added['id']
    assert (await trends.get_competitors())[0]['competitor_name'] == 'NewShop'

    assert await trends.remove_competitor(added['id'])
    assert not await trends.remove_competitor(added['id'])
    assert await trends.update_competitor('missing', {'market_share': 1.0}) is None


@pytest.mark.asyncio
async def test_alerts_are_shared_with_competitors(trends):
    alerts = await trends.get_alerts()
    assert [a['id'] for a in alerts] == ['a1', 'a2']
    assert [a['id'] for a in await trends.get_alerts(unread_only=True)] == ['a1']

    assert await trends.mark_alert_as_read('a1')
    assert not await trends.mark_alert_as_read('missing')

    competitor = await trends.get_competitor_by_id('1')
    assert competitor['alerts'][0]['is_read'] is True
    assert await trends.get_alerts(unread_only=True) == []
    assert [a['id'] for a in await trends.get_alerts_by_type('price_drop')] == ['a1']


@pytest.mark.asyncio
async def test_mark_all_alerts_as_read(trends):
    await trends.mark_all_alerts_as_read()
    assert all(a['is_read'] for a in await trends.get_alerts())


@pytest.mark.asyncio
async def test_competitive_insights(trends):
    insights = await trends.get_competitive_insights()

    assert insights['market_leader']['id'] == '2'
    assert insights['fastest_growing']['id'] == '2'
    assert insights['biggest_threat']['id'] == '2'
    assert insights['price_aggressor']['id'] == '2'


@pytest.mark.asyncio
async def test_market_trends_and_analysis(trends):
    market = await trends.get_market_trends()
    assert [t['confidence'] for t in market] == [87, 73]

    analysis = await trends.get_trend_analysis('smartphones')
    assert [t['id'] for t in analysis['trends']] == ['1']
    assert analysis['opportunities']
    assert analysis['threats'][0]['type'] == 'price_war'
    assert analysis['next_analysis'] > analysis['last_analyzed']


@pytest.mark.asyncio
async def test_config_is_copied(trends):
    config = trends.get_config()
    config['keywords'].append('drone')
    assert 'drone' not in trends.get_config()['keywords']

    updated = await trends.update_config({'monitoring_frequency': 12})
    assert updated['monitoring_frequency'] == 12
    assert updated['regions'] == ['Brasil', 'São Paulo', 'Rio de Janeiro']


@pytest.mark.asyncio
async def test_monitoring_flag(trends):
    await trends.start_monitoring()
    assert trends.monitoring
    await trends.stop_monitoring()
    assert not trends.monitoring


@pytest.mark.asyncio
async def test_without_mock_data():
    trends = TrendsService(Settings(use_mock_data=False, latency_scale=0.0))

    assert await trends.get_trend_data() == []
    assert await trends.get_competitive_insights() is None
    summary = await trends.get_trend_summary()
    assert summary['total_trends'] == 0
    assert summary['top_categories'] == []


@pytest.mark.asyncio
async def test_removing_competitor_drops_its_alerts(trends):
    assert await trends.remove_competitor('1')

    assert [a['id'] for a in await trends.get_alerts()] == ['a2']
    assert not await trends.mark_alert_as_read('a1')
