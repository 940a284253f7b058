from ngram_analysis.config import AnalysisConfig
from ngram_analysis.ngram_generator import AnalysisResults, NgramEntity, analyze, summarize
from ngram_analysis.suggestions import (derive_negative_keywords, find_opportunities, get_suggestion_summary,
                                        poor_performers, suggest_optimization_mode, top_performers)

from .conftest import make_row


def poor_entity(text, occurrences=2, impressions=100, cost=1.0):
    return NgramEntity(text=text, size=1, occurrence_count=occurrences, total_impressions=impressions,
                       total_clicks=0, total_cost=cost, total_conversions=0, ctr=0, cpc=0,
                       conversion_rate=0, cost_per_conversion=float('inf'), performance_tier='poor')


class TestNegativeKeywords:

    def test_sample_report(self, sample_rows, open_config):
        results = analyze(sample_rows, open_config)

        assert derive_negative_keywords(results.unigrams) == ['rental', 'cheap']
        assert derive_negative_keywords(results.bigrams) == ['car rental']

    def test_requires_poor_tier_and_two_occurrences(self):
        entities = [
            poor_entity('once', occurrences=1),
            poor_entity('twice', occurrences=2),
            poor_entity('fine')._replace(performance_tier='warning'),
        ]

        assert derive_negative_keywords(entities) == ['twice']

    def test_capped_at_one_hundred_in_given_order(self):
        entities = [poor_entity(f'term {i}') for i in range(150)]

        negatives = derive_negative_keywords(entities)

        assert len(negatives) == 100
        assert negatives[0] == 'term 0'
        assert negatives[-1] == 'term 99'


class TestInsights:

    def test_top_performers_by_conversions(self, open_config):
        rows = [
            make_row('alpha beta', 1000, 50, 50, 2),
            make_row('gamma delta', 1000, 50, 50, 4),
        ]

        top = top_performers(analyze(rows, open_config), limit=3)

        assert [e.total_conversions for e in top] == [4, 4, 4]
        assert all(e.performance_tier == 'good' for e in top)

    def test_poor_performers_by_cost(self, sample_rows, open_config):
        poor = poor_performers(analyze(sample_rows, open_config), limit=50)

        costs = [e.total_cost for e in poor]
        assert costs == sorted(costs, reverse=True)
        assert poor[0].text == 'cheap'

    def test_opportunities(self, open_config):
        rows = [
            make_row('blue widget', 2000, 60, 30, 0),
            make_row('red widget', 900, 60, 30, 0),
            make_row('green widget', 5000, 50, 30, 0),
        ]

        opportunities = find_opportunities(analyze(rows, open_config))

        assert [e.text for e in opportunities] == ['widget', 'blue', 'blue widget']

    def test_suggest_optimization_mode(self, sample_rows):
        assert suggest_optimization_mode(summarize(sample_rows)) == 'conversions'
        assert suggest_optimization_mode(summarize([make_row('a', 10, 1, 1, 0)])) == 'clicks'

    def test_suggestion_summary(self, sample_rows, open_config):
        results = analyze(sample_rows, open_config)

        counts = get_suggestion_summary(results)

        assert counts['good'] + counts['warning'] + counts['poor'] == len(results.all_ngrams())
        assert counts['negative_keywords'] == len(derive_negative_keywords(results.all_ngrams()))

    def test_empty_results(self):
        results = analyze([], AnalysisConfig())

        assert top_performers(results) == []
        assert find_opportunities(results) == []
        assert isinstance(results, AnalysisResults)
