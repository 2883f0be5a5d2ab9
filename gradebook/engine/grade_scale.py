from typing import List, Tuple
from pydantic import BaseModel, Field, model_validator


class GradeBand(BaseModel):
    """One step of the grade table: percentages >= min_percentage map to grade/level."""
    min_percentage: int = Field(..., ge=0, le=100)
    grade: str
    level: str


DEFAULT_GRADE_BANDS: List[GradeBand] = [
    GradeBand(min_percentage=97, grade="A+", level="Excellent"),
    GradeBand(min_percentage=93, grade="A", level="Excellent"),
    GradeBand(min_percentage=87, grade="B+", level="Very Good"),
    GradeBand(min_percentage=83, grade="B", level="Very Good"),
    GradeBand(min_percentage=77, grade="C+", level="Good"),
    GradeBand(min_percentage=73, grade="C", level="Good"),
    GradeBand(min_percentage=67, grade="D+", level="Average"),
    GradeBand(min_percentage=63, grade="D", level="Average"),
]


class GradeScale(BaseModel):
    """
    Step function from a whole percentage to a letter grade and a qualitative level.

    Bands are checked from the highest threshold down; anything below the
    lowest band is the failing grade, split into two levels at `poor_below`.
    """
    bands: List[GradeBand] = Field(default_factory=lambda: list(DEFAULT_GRADE_BANDS))
    failing_grade: str = "F"
    failing_level: str = "Below Average"
    poor_level: str = "Poor"
    poor_below: int = Field(default=50, ge=0, le=100)

    @model_validator(mode="after")
    def _check_bands(self):
        thresholds = [band.min_percentage for band in self.bands]
        if any(a <= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError("Grade bands must be ordered by strictly descending min_percentage")

        grades = [band.grade for band in self.bands] + [self.failing_grade]
        if len(grades) != len(set(grades)):
            raise ValueError("Grade letters must be unique across the scale")

        if self.bands and self.poor_below > thresholds[-1]:
            raise ValueError("poor_below cannot exceed the lowest passing band")
        return self

    @property
    def grades(self) -> List[str]:
        """Grade letters from best to worst."""
        return [band.grade for band in self.bands] + [self.failing_grade]

    def classify(self, percentage: float) -> Tuple[str, str]:
        for band in self.bands:
            if percentage >= band.min_percentage:
                return band.grade, band.level

        if percentage >= self.poor_below:
            return self.failing_grade, self.failing_level
        return self.failing_grade, self.poor_level

    def rank(self, grade: str) -> int:
        """Position of a grade letter, 0 being the best. Unknown letters rank last."""
        grades = self.grades
        return grades.index(grade) if grade in grades else len(grades)


default_grade_scale = GradeScale()
